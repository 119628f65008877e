"""
생성된 제안서(PDF) 기록 모델입니다.
저장소에 JSON 배열로 저장되며, 외부 화면 코드도 같은 키 형식을 직접 읽습니다.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_serializer


class GeneratedProposalStatus(str, Enum):
    """
    생성된 제안서의 상태입니다.

    일반적인 흐름은 generated -> sent -> approved/rejected 이지만,
    전이 규칙은 강제하지 않습니다 (어떤 상태로든 변경 가능).
    """
    GENERATED = "generated"  # PDF 생성 완료
    SENT = "sent"            # 고객에게 발송
    APPROVED = "approved"    # 고객 승인
    REJECTED = "rejected"    # 고객 거절


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """
    저장 형식의 시각 문자열 (UTC, 밀리초, Z 접미사).
    예: 2024-03-01T10:00:00.000Z
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


class GeneratedProposal(BaseModel):
    """
    생성된 제안서 한 건의 메타데이터와 원본 스냅샷입니다.

    proposal_data 는 생성 시점의 값 복사본입니다. 이후 원본 제안서가
    수정되어도 이 기록은 바뀌지 않습니다.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., description="생성 문서 ID (원본 제안서 ID와 별개)")
    proposal_id: str = Field(..., alias="proposalId", description="원본 제안서 ID")
    title: str = Field("", description="제안서 제목")
    client: str = Field("", description="표시용 고객사명")
    proposal_number: str = Field("", alias="proposalNumber", description="제안서 번호")
    generated_at: datetime = Field(default_factory=_utcnow, alias="generatedAt", description="생성 시각")
    generated_by: Optional[str] = Field(None, alias="generatedBy", description="생성한 사용자")
    status: GeneratedProposalStatus = Field(default=GeneratedProposalStatus.GENERATED, description="문서 상태")
    pdf_url: Optional[str] = Field(None, alias="pdfUrl", description="PDF 파일 주소")
    proposal_data: dict[str, Any] = Field(default_factory=dict, alias="proposalData", description="원본 제안서 스냅샷")

    # 메타데이터
    file_size: Optional[int] = Field(None, alias="fileSize", description="파일 크기 (bytes)")
    page_count: Optional[int] = Field(None, alias="pageCount", description="페이지 수")
    notes: Optional[str] = Field(None, description="메모")

    @field_serializer("generated_at", when_used="json")
    def serialize_generated_at(self, value: datetime) -> str:
        return format_timestamp(value)

    def to_storage(self) -> dict[str, Any]:
        """
        저장소 형식(camelCase JSON)으로 변환합니다.
        값이 없는 선택 필드는 키 자체를 생략합니다.
        """
        data = self.model_dump(mode="json", by_alias=True)
        return {
            key: value for key, value in data.items()
            if not (key in OPTIONAL_STORAGE_KEYS and value is None)
        }


class GeneratedProposalSummary(BaseModel):
    """선택 목록용 요약 정보."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    client: str
    proposal_number: str = Field(..., alias="proposalNumber")
    generated_at: datetime = Field(..., alias="generatedAt")

    @field_serializer("generated_at", when_used="json")
    def serialize_generated_at(self, value: datetime) -> str:
        return format_timestamp(value)


class StatusUpdate(BaseModel):
    """상태 변경 요청 본문."""
    status: GeneratedProposalStatus


OPTIONAL_STORAGE_KEYS = frozenset({"generatedBy", "pdfUrl", "fileSize", "pageCount", "notes"})

# 필드명(snake_case) -> 저장 키(camelCase)
FIELD_ALIASES: dict[str, str] = {
    name: field.alias or name for name, field in GeneratedProposal.model_fields.items()
}
