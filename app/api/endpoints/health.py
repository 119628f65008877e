"""
헬스 체크(Health Check) 엔드포인트입니다.
서버가 살아서 정상적으로 응답하는지 확인하는 용도입니다.
"""

from fastapi import APIRouter

from app.config import get_settings

router = APIRouter()


@router.get("")
async def health_check():
    """
    기본 상태 확인 함수.
    서버가 켜져 있으면 {"status": "healthy"}를 반환합니다.
    """
    return {"status": "healthy"}


@router.get("/detail")
async def health_check_detail():
    """
    상세 상태 확인 함수.
    현재 설정 정보(저장소 종류, 지연 시간 등)도 같이 보여줍니다.
    """
    settings = get_settings()
    return {
        "status": "healthy",
        "config": {
            "storage_backend": settings.storage_backend,  # file / memory / none
            "generated_proposals_key": settings.generated_proposals_key,
            "default_debounce_delay_ms": settings.default_debounce_delay_ms,
            "batch_delay_ms": settings.batch_delay_ms,
        }
    }
