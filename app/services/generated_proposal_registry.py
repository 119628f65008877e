"""
생성된 제안서 레지스트리 서비스입니다.
PDF 로 생성된 제안서의 상태와 생성 시점 스냅샷을 키-값 저장소에 보관합니다.

저장 형식:
- 키 하나("generated-proposals")에 JSON 배열 전체를 저장
- 원본 제안서 ID(proposalId) 당 기록은 하나 (다시 생성하면 덮어쓰기)

실패 처리:
- 저장소 없음: 읽기는 빈 목록, 쓰기는 무시
- 저장된 데이터 손상(읽기): 로그 후 빈 목록
- 형식이 맞지 않는 개별 기록: 조회에서는 빠지지만, 쓰기 때 원래 모양 그대로 다시 저장
- 직렬화/쓰기 실패: StorageError 로 호출자에게 전달
- 없는 ID: False / None 반환
"""

import json
import logging
import secrets
import string
import time
from collections.abc import Mapping
from typing import Any, Optional, Union

from pydantic import BaseModel, ValidationError

from app.config import Settings, get_settings
from app.exceptions import InputValidationError, PresalesError, StorageError
from app.models import (
    CommercialProposal,
    GeneratedProposal,
    GeneratedProposalStatus,
    GeneratedProposalSummary,
)
from app.models.generated_proposal import FIELD_ALIASES
from app.services.key_value_store import KeyValueStore, create_key_value_store

logger = logging.getLogger(__name__)

# 기존 저장 데이터와 같은 표기를 유지합니다
UNKNOWN_CLIENT_NAME = "Cliente não informado"

_ID_ALPHABET = string.digits + string.ascii_lowercase

ProposalSnapshot = Union[CommercialProposal, Mapping[str, Any]]

# 저장된 배열의 한 항목: 검증된 기록 또는 검증에 실패한 원본 JSON 값
StoredEntry = Union[GeneratedProposal, Any]


def generate_record_id() -> str:
    """생성 문서 ID 생성 (예: gen-1718000000000-k3j9x0a1b)."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"gen-{int(time.time() * 1000)}-{suffix}"


def snapshot_proposal(proposal: ProposalSnapshot) -> dict[str, Any]:
    """
    원본 제안서를 JSON 왕복으로 값 복사합니다.
    호출자가 이후 원본 객체를 수정해도 스냅샷은 바뀌지 않습니다.
    """
    try:
        if isinstance(proposal, BaseModel):
            return proposal.model_dump(mode="json", by_alias=True)
        return json.loads(json.dumps(proposal, ensure_ascii=False))
    except (TypeError, ValueError) as e:
        logger.error(f"[GeneratedProposalRegistry] 스냅샷 직렬화 실패: {e}", exc_info=True)
        raise StorageError(
            "제안서 데이터를 직렬화할 수 없습니다",
            details={"error": str(e)},
        ) from e


def resolve_client_name(source: CommercialProposal) -> str:
    """고객사 표시명: client.name -> cover.clientName -> 기본 문구."""
    if source.client and source.client.name:
        return source.client.name
    if source.cover and source.cover.client_name:
        return source.cover.client_name
    return UNKNOWN_CLIENT_NAME


class GeneratedProposalRegistry:
    """
    생성된 제안서 목록을 관리하는 클래스입니다.

    Attributes:
        store: 키-값 저장소. None 이면 저장소 없는 환경으로 동작
        storage_key: 목록을 저장하는 키
        legacy_key: migrate_from_old_service() 가 읽는 예전 키
    """

    def __init__(
        self,
        store: Optional[KeyValueStore],
        storage_key: str = "generated-proposals",
        legacy_key: str = "printer-proposals",
    ):
        self.store = store
        self.storage_key = storage_key
        self.legacy_key = legacy_key

    # ==================== 생성 / 조회 ====================

    def save_generated_proposal(self, proposal: ProposalSnapshot) -> GeneratedProposal:
        """
        제안서 생성 기록을 저장합니다.

        같은 원본 제안서(proposalId)의 기록이 이미 있으면 기존 ID 를 유지한 채
        필드를 덮어쓰고, 없으면 새 ID 로 추가합니다.

        Args:
            proposal: 원본 제안서 (모델 또는 camelCase 딕셔너리)

        Returns:
            저장된 기록

        Raises:
            InputValidationError: 원본 제안서에 id 등이 없을 때
            StorageError: 직렬화 또는 저장 실패
        """
        snapshot = snapshot_proposal(proposal)
        try:
            source = CommercialProposal.model_validate(snapshot)
        except ValidationError as e:
            raise InputValidationError(
                "제안서 형식이 올바르지 않습니다",
                details=e.errors(include_url=False, include_context=False),
            ) from e

        entries = self._load_entries()

        generated = GeneratedProposal(
            id=generate_record_id(),
            proposal_id=source.id,
            title=source.title,
            client=resolve_client_name(source),
            proposal_number=source.proposal_number,
            status=GeneratedProposalStatus.GENERATED,
            proposal_data=snapshot,
        )

        existing_index = self._find_index(entries, proposal_id=source.id)
        if existing_index is not None:
            # 기존 기록 갱신 (ID 유지, 생성 시 지정하지 않은 선택 필드도 유지)
            existing = entries[existing_index]
            generated = GeneratedProposal.model_validate({
                **existing.to_storage(),
                **generated.to_storage(),
                "id": existing.id,
            })
            entries[existing_index] = generated
        else:
            entries.append(generated)

        self._save_to_storage(entries)
        logger.info(f"[GeneratedProposalRegistry] 생성 제안서 저장: {generated.id} (원본 {source.id})")

        return generated

    def get_all_generated_proposals(self) -> list[GeneratedProposal]:
        """
        저장된 모든 기록을 가져옵니다.
        저장소가 없거나 데이터가 손상되었으면 빈 목록을 반환합니다.
        """
        return [entry for entry in self._load_entries() if isinstance(entry, GeneratedProposal)]

    def get_generated_proposals_for_selection(self) -> list[GeneratedProposalSummary]:
        """선택 목록용 요약 정보 (id, 제목, 고객사, 번호, 생성 시각)."""
        return [
            GeneratedProposalSummary(
                id=p.id,
                title=p.title,
                client=p.client,
                proposal_number=p.proposal_number,
                generated_at=p.generated_at,
            )
            for p in self.get_all_generated_proposals()
        ]

    def get_generated_proposal_by_id(self, record_id: str) -> Optional[GeneratedProposal]:
        """생성 문서 ID 로 기록 조회."""
        proposals = self.get_all_generated_proposals()
        index = self._find_index(proposals, record_id=record_id)
        return proposals[index] if index is not None else None

    def get_generated_proposal_by_proposal_id(self, proposal_id: str) -> Optional[GeneratedProposal]:
        """원본 제안서 ID 로 기록 조회."""
        proposals = self.get_all_generated_proposals()
        index = self._find_index(proposals, proposal_id=proposal_id)
        return proposals[index] if index is not None else None

    # ==================== 수정 / 삭제 ====================

    def update_status(self, record_id: str, status: Union[GeneratedProposalStatus, str]) -> bool:
        """
        기록의 상태를 변경합니다.
        상태 전이 규칙은 검사하지 않습니다 (approved -> generated 도 허용).

        Returns:
            기록이 없으면 False
        """
        new_status = self._coerce_status(status)
        entries = self._load_entries()
        index = self._find_index(entries, record_id=record_id)

        if index is None:
            return False

        entries[index].status = new_status
        self._save_to_storage(entries)
        logger.info(f"[GeneratedProposalRegistry] 상태 변경: {record_id} -> {new_status.value}")
        return True

    def update_generated_proposal(
        self,
        record_id: str,
        updates: Mapping[str, Any],
    ) -> Optional[GeneratedProposal]:
        """
        기록에 일부 필드를 얕게 병합합니다.
        키는 camelCase(저장 형식) 와 snake_case 모두 받습니다.

        Returns:
            갱신된 기록. 없으면 None
        """
        entries = self._load_entries()
        index = self._find_index(entries, record_id=record_id)

        if index is None:
            return None

        merged = entries[index].to_storage()
        merged.update({FIELD_ALIASES.get(key, key): value for key, value in updates.items()})

        try:
            updated = GeneratedProposal.model_validate(merged)
        except ValidationError as e:
            raise InputValidationError(
                "수정 내용이 올바르지 않습니다",
                details=e.errors(include_url=False, include_context=False),
            ) from e

        entries[index] = updated
        self._save_to_storage(entries)
        return updated

    def delete_generated_proposal(self, record_id: str) -> bool:
        """기록을 삭제합니다. 삭제된 것이 없으면 False."""
        entries = self._load_entries()
        filtered = [
            entry for entry in entries
            if not (isinstance(entry, GeneratedProposal) and entry.id == record_id)
        ]

        if len(filtered) == len(entries):
            return False

        self._save_to_storage(filtered)
        logger.info(f"[GeneratedProposalRegistry] 생성 제안서 삭제: {record_id}")
        return True

    def clear_all(self) -> None:
        """모든 기록을 삭제합니다."""
        if self.store is None:
            return

        try:
            self.store.remove_item(self.storage_key)
        except OSError as e:
            logger.error(f"[GeneratedProposalRegistry] 전체 삭제 실패: {e}", exc_info=True)
            raise StorageError(
                "생성 제안서 목록을 삭제하지 못했습니다",
                details={"key": self.storage_key, "error": str(e)},
            ) from e

        logger.info("[GeneratedProposalRegistry] 모든 생성 제안서 삭제")

    # ==================== 마이그레이션 ====================

    def migrate_from_old_service(self, legacy_key: Optional[str] = None) -> int:
        """
        예전 키에 저장된 제안서를 현재 형식으로 옮깁니다.

        proposalData 가 있는 항목만 save_generated_proposal() 로 다시 저장합니다.
        항목별 실패는 로그만 남기고 다음 항목을 계속 처리합니다.
        이미 옮긴 항목은 그대로 남습니다.

        Returns:
            옮긴 항목 수
        """
        if self.store is None:
            return 0

        legacy_key = legacy_key or self.legacy_key

        try:
            old_data = self.store.get_item(legacy_key)
        except (OSError, ValueError) as e:
            logger.error(f"[GeneratedProposalRegistry] 예전 데이터 읽기 실패: {legacy_key}, {e}")
            return 0

        if not old_data:
            return 0

        try:
            old_proposals = json.loads(old_data)
        except ValueError as e:
            logger.error(f"[GeneratedProposalRegistry] 예전 데이터 손상: {legacy_key}, {e}")
            return 0

        if not isinstance(old_proposals, list):
            logger.error(f"[GeneratedProposalRegistry] 예전 데이터 형식 오류: {legacy_key}")
            return 0

        logger.info(f"[GeneratedProposalRegistry] 예전 제안서 {len(old_proposals)}건 마이그레이션 시작")

        migrated = 0
        for item in old_proposals:
            proposal_data = item.get("proposalData") if isinstance(item, dict) else None
            if not proposal_data:
                continue

            try:
                self.save_generated_proposal(proposal_data)
                migrated += 1
            except PresalesError as e:
                logger.error(
                    f"[GeneratedProposalRegistry] 항목 마이그레이션 실패: {e.message}",
                    exc_info=True,
                )

        logger.info(f"[GeneratedProposalRegistry] 마이그레이션 완료: {migrated}건")
        return migrated

    # ==================== 내부 도우미 함수들 ====================

    def _load_entries(self) -> list[StoredEntry]:
        """
        저장된 배열을 읽습니다.

        검증에 실패한 항목은 버리지 않고 원본 JSON 값 그대로 목록에 남겨서,
        다음 쓰기 때 그대로 다시 저장되게 합니다.
        저장소가 없거나 읽을 수 없거나 배열이 아니면 빈 목록입니다.
        """
        if self.store is None:
            return []

        try:
            stored = self.store.get_item(self.storage_key)
        except (OSError, ValueError) as e:
            # 읽기 오류와 UTF-8 로 디코딩할 수 없는 파일 (UnicodeDecodeError)
            logger.error(f"[GeneratedProposalRegistry] 저장소 읽기 실패: {self.storage_key}, {e}")
            return []

        if not stored:
            return []

        try:
            raw = json.loads(stored)
        except ValueError as e:
            logger.error(f"[GeneratedProposalRegistry] 저장 데이터 손상: {self.storage_key}, {e}")
            return []

        if not isinstance(raw, list):
            logger.error(f"[GeneratedProposalRegistry] 저장 데이터 형식 오류: 배열이 아님 ({type(raw).__name__})")
            return []

        entries: list[StoredEntry] = []
        for item in raw:
            try:
                entries.append(GeneratedProposal.model_validate(item))
            except ValidationError as e:
                logger.warning(f"[GeneratedProposalRegistry] 손상된 기록 건너뜀 (원본 유지): {e.error_count()}개 오류")
                entries.append(item)
        return entries

    def _save_to_storage(self, entries: list[StoredEntry]) -> None:
        """목록 전체를 저장소에 기록합니다. 저장소가 없으면 아무것도 하지 않습니다."""
        if self.store is None:
            return

        try:
            payload = json.dumps(
                [entry.to_storage() if isinstance(entry, GeneratedProposal) else entry for entry in entries],
                ensure_ascii=False,
            )
            self.store.set_item(self.storage_key, payload)
        except (TypeError, ValueError, OSError) as e:
            logger.error(f"[GeneratedProposalRegistry] 저장 실패 {self.storage_key}: {e}", exc_info=True)
            raise StorageError(
                "생성 제안서 목록 저장에 실패했습니다",
                details={"key": self.storage_key, "error": str(e)},
            ) from e

        logger.debug(f"[GeneratedProposalRegistry] 저장: {len(entries)}건")

    @staticmethod
    def _find_index(
        entries: list[StoredEntry],
        record_id: Optional[str] = None,
        proposal_id: Optional[str] = None,
    ) -> Optional[int]:
        for index, proposal in enumerate(entries):
            if not isinstance(proposal, GeneratedProposal):
                continue
            if record_id is not None and proposal.id == record_id:
                return index
            if proposal_id is not None and proposal.proposal_id == proposal_id:
                return index
        return None

    @staticmethod
    def _coerce_status(status: Union[GeneratedProposalStatus, str]) -> GeneratedProposalStatus:
        try:
            return GeneratedProposalStatus(status)
        except ValueError as e:
            raise InputValidationError(
                f"알 수 없는 상태입니다: {status}",
                details={"allowed": [s.value for s in GeneratedProposalStatus]},
            ) from e


# 싱글톤 인스턴스 (프로그램 전체에서 공유)
_registry: Optional[GeneratedProposalRegistry] = None


def create_generated_proposal_registry(settings: Optional[Settings] = None) -> GeneratedProposalRegistry:
    """설정값으로 레지스트리를 생성합니다."""
    settings = settings or get_settings()
    return GeneratedProposalRegistry(
        store=create_key_value_store(settings),
        storage_key=settings.generated_proposals_key,
        legacy_key=settings.legacy_proposals_key,
    )


def get_generated_proposal_registry() -> GeneratedProposalRegistry:
    """GeneratedProposalRegistry 인스턴스를 반환합니다."""
    global _registry
    if _registry is None:
        _registry = create_generated_proposal_registry()
    return _registry
