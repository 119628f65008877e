"""
생성 제안서 관리 API입니다.
PDF 로 생성된 제안서 기록을 저장, 조회, 상태 변경, 삭제합니다.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from app.models import StatusUpdate
from app.services import GeneratedProposalRegistry, get_generated_proposal_registry

router = APIRouter()


@router.get("")
async def list_generated_proposals(
    registry: GeneratedProposalRegistry = Depends(get_generated_proposal_registry),
) -> dict:
    """생성된 제안서 전체 목록"""
    proposals = registry.get_all_generated_proposals()
    return {
        "proposals": [p.to_storage() for p in proposals],
        "total": len(proposals),
    }


@router.post("", status_code=201)
async def save_generated_proposal(
    proposal: dict[str, Any] = Body(...),
    registry: GeneratedProposalRegistry = Depends(get_generated_proposal_registry),
) -> dict:
    """
    제안서 생성 기록 저장 API.
    같은 원본 제안서로 다시 생성하면 기존 기록(ID 유지)을 덮어씁니다.
    """
    generated = registry.save_generated_proposal(proposal)
    return generated.to_storage()


@router.delete("")
async def clear_generated_proposals(
    registry: GeneratedProposalRegistry = Depends(get_generated_proposal_registry),
) -> dict:
    """모든 생성 기록 삭제"""
    registry.clear_all()
    return {"cleared": True}


@router.get("/selection")
async def list_for_selection(
    registry: GeneratedProposalRegistry = Depends(get_generated_proposal_registry),
) -> list[dict]:
    """선택 목록용 요약 정보"""
    return [
        summary.model_dump(mode="json", by_alias=True)
        for summary in registry.get_generated_proposals_for_selection()
    ]


@router.post("/migrate")
async def migrate_generated_proposals(
    registry: GeneratedProposalRegistry = Depends(get_generated_proposal_registry),
) -> dict:
    """예전 키에 저장된 제안서를 현재 형식으로 옮깁니다."""
    migrated = registry.migrate_from_old_service()
    return {"migrated": migrated}


@router.get("/by-proposal/{proposal_id}")
async def get_by_proposal_id(
    proposal_id: str,
    registry: GeneratedProposalRegistry = Depends(get_generated_proposal_registry),
) -> dict:
    """원본 제안서 ID 로 생성 기록 조회"""
    generated = registry.get_generated_proposal_by_proposal_id(proposal_id)

    if not generated:
        raise HTTPException(status_code=404, detail="생성된 제안서를 찾을 수 없습니다")

    return generated.to_storage()


@router.get("/{record_id}")
async def get_generated_proposal(
    record_id: str,
    registry: GeneratedProposalRegistry = Depends(get_generated_proposal_registry),
) -> dict:
    """생성 문서 ID 로 기록 조회"""
    generated = registry.get_generated_proposal_by_id(record_id)

    if not generated:
        raise HTTPException(status_code=404, detail="생성된 제안서를 찾을 수 없습니다")

    return generated.to_storage()


@router.patch("/{record_id}/status")
async def update_status(
    record_id: str,
    update: StatusUpdate,
    registry: GeneratedProposalRegistry = Depends(get_generated_proposal_registry),
) -> dict:
    """상태 변경 (전이 규칙 없음)"""
    if not registry.update_status(record_id, update.status):
        raise HTTPException(status_code=404, detail="생성된 제안서를 찾을 수 없습니다")

    return {"id": record_id, "status": update.status.value}


@router.patch("/{record_id}")
async def update_generated_proposal(
    record_id: str,
    updates: dict[str, Any] = Body(...),
    registry: GeneratedProposalRegistry = Depends(get_generated_proposal_registry),
) -> dict:
    """일부 필드 수정 (pdfUrl, notes 등)"""
    updated = registry.update_generated_proposal(record_id, updates)

    if not updated:
        raise HTTPException(status_code=404, detail="생성된 제안서를 찾을 수 없습니다")

    return updated.to_storage()


@router.delete("/{record_id}")
async def delete_generated_proposal(
    record_id: str,
    registry: GeneratedProposalRegistry = Depends(get_generated_proposal_registry),
) -> dict:
    """생성 기록 삭제"""
    if not registry.delete_generated_proposal(record_id):
        raise HTTPException(status_code=404, detail="생성된 제안서를 찾을 수 없습니다")

    return {"deleted": True, "id": record_id}
