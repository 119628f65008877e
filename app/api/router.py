"""
API 라우터 설정 파일입니다.
각 기능별로 나누어진 API 주소들을 하나로 모으는 역할을 합니다.
"""

from fastapi import APIRouter

from app.api.endpoints import health, generated_proposals, calculations

# 메인 API 라우터 생성
api_router = APIRouter()

# 헬스 체크 엔드포인트: 서버 상태 확인용 (/health)
api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"]
)

# 생성 제안서 엔드포인트: PDF 생성 기록 관리 (/generated-proposals)
api_router.include_router(
    generated_proposals.router,
    prefix="/generated-proposals",
    tags=["generated-proposals"]
)

# 계산 채널 엔드포인트: 재계산 채널 지연 정보 (/calculations)
api_router.include_router(
    calculations.router,
    prefix="/calculations",
    tags=["calculations"]
)
