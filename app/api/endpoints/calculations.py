"""
재계산 채널 정보 API입니다.
프론트엔드 계산기가 채널 키와 디바운스 지연 시간을 확인할 때 사용합니다.
"""

from fastapi import APIRouter

from app.config import get_settings
from app.services import CALCULATION_CHANNELS

router = APIRouter()


@router.get("/channels")
async def list_channels() -> dict:
    """계산 채널 목록과 채널별 지연 시간(ms)"""
    settings = get_settings()
    return {
        "channels": [
            {"key": channel.key, "delay_ms": channel.delay_ms}
            for channel in CALCULATION_CHANNELS
        ],
        "default_delay_ms": settings.default_debounce_delay_ms,
        "batch_delay_ms": settings.batch_delay_ms,
    }
