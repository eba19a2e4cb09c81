"""HTTP tests for the number format and list display endpoints."""

import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tests.numbering_helpers import literal, seed_org, serial

pytestmark = pytest.mark.db

BASE = "/api/v1/customer/settings/number-format"
LIST_DISPLAY = "/api/v1/customer/settings/list-display"


async def _create(client: AsyncClient, **overrides) -> dict:
    body = {
        "target": "CUSTOMER_NO",
        "scope": "GLOBAL",
        "parts": [literal("C"), serial(digits=4)],
    }
    body.update(overrides)
    resp = await client.post(BASE, json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def _seed_org(factory: async_sessionmaker[AsyncSession], code: str) -> str:
    async with factory() as session:
        async with session.begin():
            org = await seed_org(session, code=code)
            return str(org.id)


@pytest.mark.asyncio
async def test_create_and_get_effective(client: AsyncClient):
    created = await _create(client, joiner="-")
    assert created["version"] == 1
    assert created["fiscal_year_start_month"] == 4
    assert created["parts"][1]["options"]["digits"] == 4

    resp = await client.get(BASE, params={"target": "CUSTOMER_NO"})
    assert resp.status_code == 200
    assert resp.json()["id"] == created["id"]

    resp = await client.get(f"{BASE}/{created['id']}")
    assert resp.status_code == 200
    assert resp.json()["joiner"] == "-"


@pytest.mark.asyncio
async def test_get_effective_not_found_is_problem_json(client: AsyncClient):
    resp = await client.get(BASE, params={"target": "MANAGEMENT_NO"})
    assert resp.status_code == 404
    assert resp.headers["content-type"].startswith("application/problem+json")
    data = resp.json()
    assert data["type"] == "format-not-found"
    assert data["instance"] == BASE


@pytest.mark.asyncio
async def test_get_effective_invalid_target(client: AsyncClient):
    resp = await client.get(BASE, params={"target": "INVOICE_NO"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_create_duplicate_returns_409(client: AsyncClient):
    await _create(client)
    resp = await client.post(
        BASE, json={"target": "CUSTOMER_NO", "scope": "GLOBAL", "parts": [serial()]}
    )
    assert resp.status_code == 409
    assert resp.json()["type"] == "format-conflict"


@pytest.mark.asyncio
async def test_create_rejects_invalid_parts(client: AsyncClient):
    for parts in (
        [],
        [{"type": "BARCODE"}],
        [serial(digits=13)],
        [literal("Ｃ")],
    ):
        resp = await client.post(
            BASE, json={"target": "CUSTOMER_NO", "scope": "GLOBAL", "parts": parts}
        )
        assert resp.status_code == 422, parts


@pytest.mark.asyncio
async def test_update_with_version(client: AsyncClient):
    created = await _create(client)

    resp = await client.put(
        f"{BASE}/{created['id']}", json={"version": 1, "description": "Customer numbers"}
    )
    assert resp.status_code == 200
    assert resp.json()["version"] == 2

    resp = await client.put(f"{BASE}/{created['id']}", json={"version": 1, "enabled": False})
    assert resp.status_code == 409
    assert resp.json()["type"] == "version-conflict"

    resp = await client.put(f"{BASE}/{created['id']}", json={"enabled": False})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_update_unknown_id_404(client: AsyncClient):
    resp = await client.put(f"{BASE}/{uuid.uuid4()}", json={"version": 1})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_generate_sequence_committed_across_requests(client: AsyncClient):
    await _create(client)

    first = await client.post(f"{BASE}/generate", json={"target": "CUSTOMER_NO"})
    second = await client.post(f"{BASE}/generate", json={"target": "CUSTOMER_NO"})

    assert first.status_code == 200
    assert first.json() == {"value": "C0001"}
    assert second.json() == {"value": "C0002"}


@pytest.mark.asyncio
async def test_generate_disabled_returns_409(client: AsyncClient):
    await _create(client, enabled=False)
    resp = await client.post(f"{BASE}/generate", json={"target": "CUSTOMER_NO"})
    assert resp.status_code == 409
    assert resp.json()["type"] == "format-disabled"


@pytest.mark.asyncio
async def test_generate_org_code_without_org_returns_400(client: AsyncClient):
    await _create(client, parts=[{"type": "ORG_CODE"}, serial()])
    resp = await client.post(f"{BASE}/generate", json={"target": "CUSTOMER_NO"})
    assert resp.status_code == 400
    assert resp.json()["type"] == "org-required"


@pytest.mark.asyncio
async def test_org_override_generate(
    client: AsyncClient, session_factory: async_sessionmaker[AsyncSession]
):
    org_id = await _seed_org(session_factory, "OSK")
    await _create(client)
    await _create(
        client,
        scope="ORG",
        org_id=org_id,
        joiner="-",
        parts=[{"type": "ORG_CODE"}, {"type": "DATE"}, serial(digits=3, reset_policy="DAILY", scope="ORG")],
    )

    resp = await client.post(
        f"{BASE}/generate",
        json={"target": "CUSTOMER_NO", "org_id": org_id, "date": "2025/03/10"},
    )
    assert resp.json() == {"value": "OSK-20250310-001"}

    resp = await client.post(f"{BASE}/generate", json={"target": "CUSTOMER_NO"})
    assert resp.json() == {"value": "C0001"}


@pytest.mark.asyncio
async def test_preview_does_not_advance_generate(client: AsyncClient):
    created = await _create(client)

    for _ in range(3):
        resp = await client.post(
            f"{BASE}/preview", json={"id": created["id"], "sample": {"date": "2025-03-10"}}
        )
        assert resp.status_code == 200
        assert resp.json()["sample"] == "C0001"

    resp = await client.post(f"{BASE}/generate", json={"target": "CUSTOMER_NO"})
    assert resp.json() == {"value": "C0001"}


@pytest.mark.asyncio
async def test_preview_draft_config(client: AsyncClient):
    resp = await client.post(
        f"{BASE}/preview",
        json={
            "config": {
                "target": "CUSTOMER_NO",
                "scope": "GLOBAL",
                "parts": [
                    {"type": "FISCAL_YEAR", "options": {"style": "YYYY", "start_month": 4}},
                    serial(digits=4),
                ],
            },
            "sample": {"date": "2025-03-31"},
        },
    )
    assert resp.status_code == 200
    assert resp.json() == {
        "sample": "20240001",
        "parts": [
            {"type": "FISCAL_YEAR", "value": "2024"},
            {"type": "SERIAL", "value": "0001"},
        ],
    }


@pytest.mark.asyncio
async def test_preview_requires_id_or_config(client: AsyncClient):
    resp = await client.post(f"{BASE}/preview", json={"sample": {}})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_list_display_roundtrip(client: AsyncClient):
    resp = await client.get(LIST_DISPLAY)
    assert resp.status_code == 200
    assert resp.json()["show_customer_no"] is True
    assert resp.json()["show_management_no"] is False

    resp = await client.put(LIST_DISPLAY, json={"scope": "GLOBAL", "show_management_no": True})
    assert resp.status_code == 200
    assert resp.json()["version"] == 1

    resp = await client.put(
        LIST_DISPLAY,
        json={"scope": "GLOBAL", "show_management_no": False, "if_match_version": 7},
    )
    assert resp.status_code == 409

    resp = await client.get(LIST_DISPLAY)
    assert resp.json()["show_management_no"] is True
