"""
키-값 저장소 서비스입니다.
브라우저 localStorage 와 같은 방식(문자열 키 -> 문자열 값)으로 데이터를 보관합니다.

구현체:
1. FileKeyValueStore: 키마다 파일 하나 (기본)
2. MemoryKeyValueStore: 메모리 딕셔너리 (테스트/임시 실행)

저장소가 없는 실행 환경은 None 으로 표현합니다.
"""

import logging
from pathlib import Path
from typing import Optional, Protocol

from app.config import Settings, get_settings

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """localStorage 호환 인터페이스."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class FileKeyValueStore:
    """파일 기반 키-값 저장소 클래스입니다."""

    def __init__(self, base_path: str = "data/local_storage"):
        # 기본 저장 경로 설정
        self.base_path = Path(base_path)
        # 저장 폴더가 없으면 만듭니다.
        self.base_path.mkdir(parents=True, exist_ok=True)

    def get_item(self, key: str) -> Optional[str]:
        """키에 저장된 문자열을 읽습니다. 없으면 None."""
        file_path = self._get_file_path(key)
        if not file_path.exists():
            return None
        return file_path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        """키에 문자열을 저장합니다 (덮어쓰기)."""
        self._get_file_path(key).write_text(value, encoding="utf-8")

    def remove_item(self, key: str) -> None:
        """키를 삭제합니다. 없는 키는 무시합니다."""
        self._get_file_path(key).unlink(missing_ok=True)

    def keys(self) -> list[str]:
        """저장된 키 목록."""
        return sorted(path.stem for path in self.base_path.glob("*.json"))

    def _get_file_path(self, key: str) -> Path:
        """키에 해당하는 파일 경로 반환."""
        safe_key = key.replace("/", "_").replace("\\", "_")
        return self.base_path / f"{safe_key}.json"


class MemoryKeyValueStore:
    """메모리 기반 키-값 저장소 (프로세스 종료 시 사라짐)."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._items)


def create_key_value_store(settings: Optional[Settings] = None) -> Optional[KeyValueStore]:
    """
    설정(storage_backend)에 맞는 저장소를 만듭니다.

    Returns:
        저장소 인스턴스. "none" 이면 None (저장소 없는 환경)
    """
    settings = settings or get_settings()
    backend = settings.storage_backend.lower()

    if backend == "file":
        return FileKeyValueStore(settings.storage_dir)
    if backend == "memory":
        return MemoryKeyValueStore()
    if backend == "none":
        logger.info("[KeyValueStore] 저장소 없이 실행합니다 (읽기는 빈 값, 쓰기는 무시)")
        return None
    raise ValueError(f"지원하지 않는 storage_backend: {settings.storage_backend}")
