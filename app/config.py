from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """
    애플리케이션의 설정을 관리하는 클래스입니다.
    환경 변수(.env 파일)에서 설정값을 읽어옵니다.
    """

    # 서버 설정: 서버가 실행될 주소와 포트 번호
    host: str = "0.0.0.0"  # 모든 외부 접속 허용
    port: int = 8000
    allowed_origins: list[str] = ["http://localhost:3000"]  # 프론트엔드 주소

    # 저장소 설정: 브라우저 localStorage 를 대신하는 키-값 저장소
    storage_backend: str = "file"  # file, memory, none 중 하나
    storage_dir: str = "data/local_storage"
    generated_proposals_key: str = "generated-proposals"  # 생성된 제안서 목록 키
    legacy_proposals_key: str = "printer-proposals"  # 마이그레이션 대상 구 키

    # 재계산 스케줄링 설정 (밀리초)
    default_debounce_delay_ms: int = 300  # 채널 지연 기본값
    batch_delay_ms: int = 100  # 배치 플러시 대기 시간

    class Config:
        # 설정을 읽어올 파일 지정
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """
    설정을 가져오는 함수입니다.
    @lru_cache를 사용하여 한 번 읽은 설정은 메모리에 저장해두고 재사용합니다.
    """
    return Settings()
