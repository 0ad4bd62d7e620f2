"""Tests for attribute history endpoints."""

from datetime import date

import pytest
from httpx import AsyncClient


async def _create(client: AsyncClient, **fields) -> int:
    response = await client.post("/people", json={"is_alive": True, **fields})
    return response.json()["data"]["person_id"]


@pytest.mark.asyncio
class TestHistoryEndpoints:
    @pytest.mark.parametrize("path", ["/names", "/sex", "/aliases", "/guardians"])
    async def test_empty_ledgers(self, client: AsyncClient, path: str):
        response = await client.get(path)
        assert response.status_code == 200
        assert response.json() == {"success": True, "data": []}

    async def test_names_after_create(self, client: AsyncClient):
        person_id = await _create(client, first_name="Ada", current_sex="F")

        response = await client.get("/names")
        assert response.json()["data"] == [
            {
                "history_id": 1,
                "person_id": person_id,
                "name": "Ada",
                "start_date": date.today().isoformat(),
            }
        ]

    async def test_value_field_names(self, client: AsyncClient):
        guardian = await _create(client, first_name="Grace")
        await _create(client, current_alias="Countess", guardian_id=guardian)

        alias = (await client.get("/aliases")).json()["data"][0]
        assert alias["alias"] == "Countess"
        row = (await client.get("/guardians")).json()["data"][0]
        assert row["guardian_id"] == guardian

    async def test_per_person_listing(self, client: AsyncClient):
        ada = await _create(client, first_name="Ada")
        charles = await _create(client, first_name="Charles")
        await client.patch(f"/people/{ada}", json={"first_name": "Augusta"})

        ada_names = (await client.get(f"/names/{ada}")).json()["data"]
        assert [n["name"] for n in ada_names] == ["Ada", "Augusta"]
        charles_names = (await client.get(f"/names/{charles}")).json()["data"]
        assert [n["name"] for n in charles_names] == ["Charles"]

    async def test_full_listing_spans_people_in_order(self, client: AsyncClient):
        ada = await _create(client, current_sex="F")
        charles = await _create(client, current_sex="M")
        await client.patch(f"/people/{ada}", json={"current_sex": "X"})

        rows = (await client.get("/sex")).json()["data"]
        assert [(r["person_id"], r["sex"]) for r in rows] == [
            (ada, "F"),
            (charles, "M"),
            (ada, "X"),
        ]
        ids = [r["history_id"] for r in rows]
        assert ids == sorted(ids)
