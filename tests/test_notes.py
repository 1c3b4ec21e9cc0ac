# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Note endpoint tests: CRUD, ownership, filtering and pagination."""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.anyio


async def _create(client: AsyncClient, headers: dict, title: str, content: str = "body") -> dict:
    r = await client.post("/api/notes", json={"title": title, "content": content}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


async def test_notes_require_auth(client: AsyncClient):
    r = await client.get("/api/notes")
    assert r.status_code == 401


async def test_create_and_get_note(client: AsyncClient, login_as):
    headers = await login_as("owner@example.com")
    note = await _create(client, headers, "  Groceries  ", "milk, eggs")
    assert note["title"] == "Groceries"
    assert note["owner"]["email"] == "owner@example.com"
    assert note["owner"]["is_verified"] is False

    r = await client.get(f"/api/notes/{note['id']}", headers=headers)
    assert r.status_code == 200
    assert r.json()["content"] == "milk, eggs"


async def test_create_note_validation(client: AsyncClient, login_as):
    headers = await login_as("v@example.com")
    r = await client.post("/api/notes", json={"title": "", "content": "x"}, headers=headers)
    assert r.status_code == 422
    r = await client.post("/api/notes", json={"title": "x" * 201, "content": "x"}, headers=headers)
    assert r.status_code == 422
    r = await client.post("/api/notes", json={"title": "t"}, headers=headers)
    assert r.status_code == 422


async def test_other_users_notes_are_invisible(client: AsyncClient, login_as):
    alice = await login_as("alice@example.com")
    bob = await login_as("bob@example.com")
    note = await _create(client, alice, "private")

    assert (await client.get(f"/api/notes/{note['id']}", headers=bob)).status_code == 404
    r = await client.put(f"/api/notes/{note['id']}", json={"title": "mine"}, headers=bob)
    assert r.status_code == 404
    assert (await client.delete(f"/api/notes/{note['id']}", headers=bob)).status_code == 404

    listing = await client.get("/api/notes", headers=bob)
    assert listing.json()["total_count"] == 0
    assert (await client.get(f"/api/notes/{note['id']}", headers=alice)).status_code == 200


async def test_update_note(client: AsyncClient, login_as):
    headers = await login_as("u@example.com")
    note = await _create(client, headers, "draft", "v1")
    r = await client.put(f"/api/notes/{note['id']}", json={"content": "v2"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["title"] == "draft"
    assert r.json()["content"] == "v2"

    empty = await client.put(f"/api/notes/{note['id']}", json={}, headers=headers)
    assert empty.status_code == 422


async def test_delete_note(client: AsyncClient, login_as):
    headers = await login_as("d@example.com")
    note = await _create(client, headers, "temp")
    r = await client.delete(f"/api/notes/{note['id']}", headers=headers)
    assert r.status_code == 200
    assert r.json()["id"] == note["id"]
    assert (await client.get(f"/api/notes/{note['id']}", headers=headers)).status_code == 404


async def test_list_pagination(client: AsyncClient, login_as):
    headers = await login_as("p@example.com")
    for i in range(5):
        await _create(client, headers, f"note {i}")

    first = (await client.get("/api/notes?limit=2", headers=headers)).json()
    assert first["total_count"] == 5
    assert first["total_pages"] == 3
    assert first["current_page"] == 1
    assert first["has_next_page"] is True
    assert first["has_prev_page"] is False
    assert [n["title"] for n in first["notes"]] == ["note 4", "note 3"]

    last = (await client.get("/api/notes?limit=2&page=3", headers=headers)).json()
    assert [n["title"] for n in last["notes"]] == ["note 0"]
    assert last["has_next_page"] is False
    assert last["has_prev_page"] is True


async def test_list_limits_validated(client: AsyncClient, login_as):
    headers = await login_as("l@example.com")
    assert (await client.get("/api/notes?limit=101", headers=headers)).status_code == 422
    assert (await client.get("/api/notes?page=0", headers=headers)).status_code == 422


async def test_list_filter_by_title(client: AsyncClient, login_as):
    headers = await login_as("f@example.com")
    await _create(client, headers, "Meeting notes")
    await _create(client, headers, "Shopping")
    r = await client.get("/api/notes?title=meeting", headers=headers)
    titles = [n["title"] for n in r.json()["notes"]]
    assert titles == ["Meeting notes"]


async def test_list_filter_by_date(client: AsyncClient, login_as):
    headers = await login_as("date@example.com")
    await _create(client, headers, "today")
    future = await client.get("/api/notes?created_from=2999-01-01T00:00:00", headers=headers)
    assert future.json()["total_count"] == 0
    past = await client.get("/api/notes?created_from=2000-01-01T00:00:00", headers=headers)
    assert past.json()["total_count"] == 1


async def test_search_notes(client: AsyncClient, login_as):
    headers = await login_as("s@example.com")
    await _create(client, headers, "Recipes", "pancake batter")
    await _create(client, headers, "Travel", "passport")
    r = await client.get("/api/notes/search?search=pancake", headers=headers)
    assert r.status_code == 200
    assert [n["title"] for n in r.json()] == ["Recipes"]
    everything = await client.get("/api/notes/search", headers=headers)
    assert len(everything.json()) == 2
