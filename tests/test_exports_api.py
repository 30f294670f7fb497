"""Export API + renderer tests."""

import json
from datetime import datetime, timezone

import pytest

from dissipate.db.models import Message
from dissipate.services.export_service import render_json, render_markdown


def _message(content: str, created_at: datetime) -> Message:
    return Message(
        id="11111111-1111-1111-1111-111111111111",
        user_id="owner",
        content=content,
        created_at=created_at,
        updated_at=created_at,
    )


# ═══════════════════════════════════════════════════════════
# Renderers
# ═══════════════════════════════════════════════════════════


def test_render_markdown_layout():
    stamp = datetime(2024, 3, 5, 14, 7, tzinfo=timezone.utc)
    out = render_markdown([_message("hello there", stamp)], exported_at=stamp)
    assert out == (
        "# Messages Export\n\n"
        "Exported: March 05, 2024\n\n"
        "---\n\n"
        "## March 05, 2024 at 02:07 PM\n\n"
        "hello there\n\n"
        "---\n\n"
    )


def test_render_markdown_empty():
    stamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert render_markdown([], exported_at=stamp).count("##") == 0


def test_render_json_keeps_unicode():
    stamp = datetime(2024, 3, 5, tzinfo=timezone.utc)
    out = render_json([_message("café ☕", stamp)])
    assert "café ☕" in out
    [entry] = json.loads(out)
    assert set(entry) == {"id", "content", "created_at", "updated_at"}


# ═══════════════════════════════════════════════════════════
# Endpoints
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_export_json(client):
    await client.post("/api/messages", json={"content": "one"})
    await client.post("/api/messages", json={"content": "two"})

    r = await client.get("/api/export/json")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("application/json")
    assert 'filename="messages.json"' in r.headers["content-disposition"]
    assert [m["content"] for m in r.json()] == ["two", "one"]


@pytest.mark.asyncio
async def test_export_markdown(client):
    await client.post("/api/messages", json={"content": "a thought"})

    r = await client.get("/api/export/markdown")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/markdown")
    assert 'filename="messages.md"' in r.headers["content-disposition"]
    assert r.text.startswith("# Messages Export\n\n")
    assert "a thought" in r.text


@pytest.mark.asyncio
async def test_export_requires_token(unauthenticated_client):
    r = await unauthenticated_client.get("/api/export/json")
    assert r.status_code == 401
