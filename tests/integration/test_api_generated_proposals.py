"""
생성 제안서 API 통합 테스트.
저장(upsert), 조회, 상태 변경, 수정, 삭제, 마이그레이션, 에러 응답을 확인합니다.
메모리 저장소 레지스트리를 의존성 주입으로 사용합니다.
"""

import json

from httpx import AsyncClient

BASE_URL = "/api/v1/generated-proposals"


async def test_save_and_list(async_client: AsyncClient, sample_proposal):
    """POST 로 저장하면 201 과 camelCase 기록을 반환하고, 목록에 나타나야 한다."""
    async with async_client as client:
        response = await client.post(BASE_URL, json=sample_proposal)

        assert response.status_code == 201

        record = response.json()
        assert record["proposalId"] == "prop-001"
        assert record["client"] == "한빛전자"
        assert record["status"] == "generated"
        assert record["proposalData"] == sample_proposal

        listing = (await client.get(BASE_URL)).json()
        assert listing["total"] == 1
        assert listing["proposals"][0]["id"] == record["id"]


async def test_resave_keeps_id(async_client: AsyncClient, sample_proposal):
    """같은 원본 제안서를 다시 저장하면 기존 ID 로 덮어써야 한다."""
    async with async_client as client:
        first = (await client.post(BASE_URL, json=sample_proposal)).json()

        sample_proposal["title"] = "수정된 제목"
        second = (await client.post(BASE_URL, json=sample_proposal)).json()

        assert second["id"] == first["id"]
        assert second["title"] == "수정된 제목"
        assert (await client.get(BASE_URL)).json()["total"] == 1


async def test_save_without_id_returns_400(async_client: AsyncClient):
    """id 가 없는 제안서를 저장하면 ERR_INPUT_001 과 400 을 반환해야 한다."""
    async with async_client as client:
        response = await client.post(BASE_URL, json={"title": "ID 없음"})

        assert response.status_code == 400

        data = response.json()
        assert data["error_code"] == "ERR_INPUT_001"
        assert "timestamp" in data


async def test_get_by_id_and_by_proposal_id(async_client: AsyncClient, sample_proposal):
    """생성 ID 와 원본 제안서 ID 로 각각 조회할 수 있어야 한다."""
    async with async_client as client:
        record = (await client.post(BASE_URL, json=sample_proposal)).json()

        by_id = await client.get(f"{BASE_URL}/{record['id']}")
        assert by_id.status_code == 200
        assert by_id.json()["proposalId"] == "prop-001"

        by_proposal = await client.get(f"{BASE_URL}/by-proposal/prop-001")
        assert by_proposal.status_code == 200
        assert by_proposal.json()["id"] == record["id"]


async def test_get_missing_returns_404(async_client: AsyncClient):
    """없는 ID 조회는 404 를 반환해야 한다."""
    async with async_client as client:
        assert (await client.get(f"{BASE_URL}/nonexistent")).status_code == 404
        assert (await client.get(f"{BASE_URL}/by-proposal/nonexistent")).status_code == 404


async def test_selection(async_client: AsyncClient, sample_proposal, other_proposal):
    """GET /selection 은 요약 필드만 반환해야 한다."""
    async with async_client as client:
        await client.post(BASE_URL, json=sample_proposal)
        await client.post(BASE_URL, json=other_proposal)

        response = await client.get(f"{BASE_URL}/selection")

        assert response.status_code == 200
        summaries = response.json()
        assert len(summaries) == 2
        assert set(summaries[0]) == {"id", "title", "client", "proposalNumber", "generatedAt"}


async def test_update_status(async_client: AsyncClient, sample_proposal):
    """PATCH /{id}/status 는 어떤 상태로든 변경할 수 있어야 한다."""
    async with async_client as client:
        record = (await client.post(BASE_URL, json=sample_proposal)).json()

        approved = await client.patch(f"{BASE_URL}/{record['id']}/status", json={"status": "approved"})
        assert approved.status_code == 200

        back = await client.patch(f"{BASE_URL}/{record['id']}/status", json={"status": "generated"})
        assert back.json() == {"id": record["id"], "status": "generated"}


async def test_update_status_errors(async_client: AsyncClient, sample_proposal):
    """없는 ID 는 404, 허용되지 않은 상태 값은 422 를 반환해야 한다."""
    async with async_client as client:
        missing = await client.patch(f"{BASE_URL}/nonexistent/status", json={"status": "sent"})
        assert missing.status_code == 404

        record = (await client.post(BASE_URL, json=sample_proposal)).json()
        invalid = await client.patch(f"{BASE_URL}/{record['id']}/status", json={"status": "archived"})
        assert invalid.status_code == 422


async def test_partial_update(async_client: AsyncClient, sample_proposal):
    """PATCH /{id} 는 일부 필드만 병합해야 한다."""
    async with async_client as client:
        record = (await client.post(BASE_URL, json=sample_proposal)).json()

        response = await client.patch(
            f"{BASE_URL}/{record['id']}",
            json={"pdfUrl": "/files/prop-001.pdf", "pageCount": 8},
        )

        assert response.status_code == 200
        updated = response.json()
        assert updated["pdfUrl"] == "/files/prop-001.pdf"
        assert updated["pageCount"] == 8
        assert updated["title"] == record["title"]

        missing = await client.patch(f"{BASE_URL}/nonexistent", json={"notes": "x"})
        assert missing.status_code == 404


async def test_delete_and_clear(async_client: AsyncClient, sample_proposal, other_proposal):
    """DELETE /{id} 는 한 건을, DELETE "" 는 전체를 삭제해야 한다."""
    async with async_client as client:
        record = (await client.post(BASE_URL, json=sample_proposal)).json()
        await client.post(BASE_URL, json=other_proposal)

        deleted = await client.delete(f"{BASE_URL}/{record['id']}")
        assert deleted.status_code == 200
        assert (await client.get(BASE_URL)).json()["total"] == 1

        assert (await client.delete(f"{BASE_URL}/{record['id']}")).status_code == 404

        cleared = await client.delete(BASE_URL)
        assert cleared.json() == {"cleared": True}
        assert (await client.get(BASE_URL)).json()["total"] == 0


async def test_migrate(async_client: AsyncClient, memory_store, sample_proposal):
    """POST /migrate 는 예전 키의 제안서를 옮기고 건수를 반환해야 한다."""
    memory_store.set_item("printer-proposals", json.dumps([
        {"proposalData": sample_proposal},
        {"id": "no-data"},
    ]))

    async with async_client as client:
        response = await client.post(f"{BASE_URL}/migrate")

        assert response.status_code == 200
        assert response.json() == {"migrated": 1}
        assert (await client.get(f"{BASE_URL}/by-proposal/prop-001")).status_code == 200
