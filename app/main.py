"""
프리세일즈 코어 서비스의 메인 진입점 파일입니다.
웹 서버 애플리케이션을 생성하고 설정하는 역할을 담당합니다.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.api.router import api_router
from app.exceptions import PresalesError, InputValidationError
from app.models import ErrorResponse
from app.services import get_calculation_scheduler, get_generated_proposal_registry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    애플리케이션의 생명주기(시작과 종료)를 관리하는 함수입니다.

    서버가 시작될 때:
    1. 설정을 불러오고 예전 키의 생성 제안서를 옮깁니다.

    서버가 종료될 때:
    1. 대기 중인 재계산 타이머를 정리합니다.
    """
    settings = get_settings()
    logger.info(f"프리세일즈 코어가 다음 주소에서 시작됩니다: {settings.host}:{settings.port}")
    logger.info(f"생성 제안서 저장소: {settings.storage_backend}")

    get_generated_proposal_registry().migrate_from_old_service()

    yield

    # 종료 시: 리소스 정리
    get_calculation_scheduler().dispose()
    logger.info("프리세일즈 코어가 종료됩니다")


def create_app() -> FastAPI:
    """
    FastAPI 웹 애플리케이션을 생성하고 설정하는 함수입니다.

    주요 기능:
    1. 기본 앱 정보 설정 (제목, 설명 등)
    2. CORS 설정 (프론트엔드와의 통신 허용 설정)
    3. API 라우터 연결 (기능별 주소 연결)
    """
    settings = get_settings()

    app = FastAPI(
        title="프리세일즈 코어",
        description="가격 계산기 재계산 스케줄링과 생성 제안서 관리",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",  # 개발자용 문서 주소
        redoc_url="/redoc",
    )

    # CORS 미들웨어 설정: 프론트엔드 웹페이지가 이 서버에 접속할 수 있도록 허용하는 설정입니다.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 글로벌 예외 핸들러: 커스텀 예외를 구조화된 JSON 응답으로 변환
    @app.exception_handler(PresalesError)
    async def presales_error_handler(request: Request, exc: PresalesError):
        status_code = 400 if isinstance(exc, InputValidationError) else 500
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error_code=exc.error_code,
                message=exc.message,
                details=exc.details,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def general_error_handler(request: Request, exc: Exception):
        logger.error(f"처리되지 않은 예외: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error_code="ERR_INTERNAL",
                message="내부 서버 오류가 발생했습니다",
            ).model_dump(mode="json"),
        )

    # API 라우터 포함: /api/v1 주소 아래에 모든 기능을 연결합니다.
    app.include_router(api_router, prefix="/api/v1")

    return app


# 애플리케이션 인스턴스 생성
app = create_app()


@app.get("/")
async def root():
    """
    루트 엔드포인트: 서버가 정상적으로 동작하는지 확인하는 기본 주소입니다.
    """
    return {
        "name": "프리세일즈 코어",
        "version": "1.0.0",
        "description": "재계산 스케줄링과 생성 제안서 관리",
        "docs": "/docs",
        "api": "/api/v1",
    }


# 이 파일을 직접 실행했을 때 서버를 구동시키는 코드입니다.
if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,  # 코드가 변경되면 자동으로 재시작 (개발 모드)
    )
