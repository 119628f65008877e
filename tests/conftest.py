"""공유 pytest fixture 모음."""

import pytest

from app.services.key_value_store import MemoryKeyValueStore
from app.services.generated_proposal_registry import GeneratedProposalRegistry


@pytest.fixture
def memory_store():
    """빈 MemoryKeyValueStore fixture."""
    return MemoryKeyValueStore()


@pytest.fixture
def registry(memory_store):
    """메모리 저장소 기반 GeneratedProposalRegistry fixture."""
    return GeneratedProposalRegistry(store=memory_store)


@pytest.fixture
def detached_registry():
    """저장소가 없는 환경의 GeneratedProposalRegistry fixture."""
    return GeneratedProposalRegistry(store=None)


@pytest.fixture
def sample_proposal():
    """camelCase 딕셔너리 형태의 상업 제안서 fixture."""
    return {
        "id": "prop-001",
        "title": "서비스 데스크 아웃소싱 제안",
        "proposalNumber": "PROP-2024-001",
        "version": "1.0",
        "status": "DRAFT",
        "client": {
            "name": "한빛전자",
            "email": "it@hanbit.example",
            "address": {"city": "서울", "zipCode": "04524"},
        },
        "cover": {"clientName": "한빛전자 주식회사", "date": "2024-03-01"},
        "items": [
            {"description": "1단계 지원", "quantity": 5, "unitPrice": 4200.5},
            {"description": "NOC 모니터링", "quantity": 1, "unitPrice": 15000},
        ],
        "attachments": [],
    }


@pytest.fixture
def other_proposal():
    """표지 정보만 있는 두 번째 제안서 fixture."""
    return {
        "id": "prop-002",
        "title": "프린터 아웃소싱 제안",
        "proposalNumber": "PROP-2024-002",
        "cover": {"clientName": "누리상사"},
    }


@pytest.fixture
def async_client(registry):
    """httpx AsyncClient fixture (FastAPI 테스트용, 메모리 레지스트리 주입)."""
    from httpx import AsyncClient, ASGITransport
    from app.main import app
    from app.services import get_generated_proposal_registry

    app.dependency_overrides[get_generated_proposal_registry] = lambda: registry
    transport = ASGITransport(app=app)
    yield AsyncClient(transport=transport, base_url="http://test")
    app.dependency_overrides.clear()
