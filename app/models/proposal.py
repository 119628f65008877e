"""
원본 상업 제안서(Commercial Proposal) 스냅샷 모델입니다.
제안서 생성 시점에 필요한 필드만 명시하고 나머지는 그대로 보존합니다.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ClientInfo(BaseModel):
    """고객 정보 (이름 외 필드는 보존만 합니다)."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: Optional[str] = Field(None, description="고객사명")


class CoverInfo(BaseModel):
    """표지 정보."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    client_name: Optional[str] = Field(None, alias="clientName", description="표지에 표시할 고객사명")


class CommercialProposal(BaseModel):
    """
    PDF 로 생성되는 상업 제안서 원본입니다.

    JSON 직렬화 시 camelCase 키(proposalNumber 등)를 사용합니다.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., description="원본 제안서 ID")
    title: str = Field("", description="제안서 제목")
    proposal_number: str = Field("", alias="proposalNumber", description="제안서 번호")
    client: Optional[ClientInfo] = None
    cover: Optional[CoverInfo] = None
