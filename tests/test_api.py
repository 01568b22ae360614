from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from novelgloss import app as app_module
from novelgloss.config import settings
from novelgloss.database import get_store
from novelgloss.exceptions import TransportError
from novelgloss.services import llm_service

CHAPTER_URL = "https://www.69shuba.com/txt/1001/555"


@pytest.fixture
def client(tmp_path, monkeypatch, fake_translator):
    monkeypatch.setattr(settings, "db_path", tmp_path / "api.db")
    monkeypatch.setattr(settings, "llm_api_key", "")
    monkeypatch.setattr(llm_service, "_runtime", {})
    translator = fake_translator(
        translate=lambda text: "Li Ming met Zhao.",
        names='[{"original": "李明", "translated": "Li Ming"}, {"original": "赵", "translated": "Zhao"}]',
    )
    monkeypatch.setattr(llm_service, "get_translator", lambda: translator)
    return TestClient(app_module.create_app())


def _translate_chapter(client) -> dict:
    resp = client.post("/api/pages", json={"url": CHAPTER_URL, "body": "李明见到了赵。"})
    assert resp.status_code == 200
    return resp.json()


def test_chapter_page_creates_session(client):
    data = _translate_chapter(client)

    assert data["work_id"] == "1001"
    assert data["added_names"] == 2
    assert data["extraction_error"] is None
    assert 'data-original="赵"' in data["markup"]

    again = client.get(f"/api/sessions/{data['session_id']}").json()
    assert again["markup"] == data["markup"]


def test_book_page_returns_metadata(client):
    resp = client.post("/api/pages", json={
        "url": "https://www.69shuba.com/book/1001.htm", "title": "标题", "synopsis": "简介",
    })
    assert resp.status_code == 200
    assert resp.json() == {"work_id": "1001", "title": "Li Ming met Zhao.", "synopsis": "Li Ming met Zhao."}


def test_bad_page_url_is_rejected(client):
    assert client.post("/api/pages", json={"url": "https://example.com/"}).status_code == 400


def test_commands_from_selection(client):
    sid = _translate_chapter(client)["session_id"]
    selection = '<span data-original="赵">Zhao</span>'

    resp = client.post(f"/api/sessions/{sid}/commands/promote", json={"selection": selection})
    assert resp.json()["applied"] is True

    names = client.get("/api/works/1001/names").json()
    assert [p["original"] for p in names["global"]] == ["赵"]
    assert [p["original"] for p in names["local"]] == ["李明"]

    resp = client.post(f"/api/sessions/{sid}/commands/rename",
                       json={"original": "李明", "new_translated": "Lee Ming"})
    assert resp.json()["applied"] is True
    assert "Lee Ming" in resp.json()["markup"]

    resp = client.post(f"/api/sessions/{sid}/commands/copy", json={"selection": selection})
    assert resp.json()["clipboard"] == "赵"


def test_command_without_resolvable_selection_is_noop(client):
    sid = _translate_chapter(client)["session_id"]
    resp = client.post(f"/api/sessions/{sid}/commands/delete", json={"selection": "plain text"})

    assert resp.status_code == 200
    assert resp.json()["applied"] is False
    assert len(client.get("/api/works/1001/names").json()["local"]) == 2


def test_unknown_session_is_404(client):
    assert client.post("/api/sessions/missing/commands/check", json={}).status_code == 404


def test_errors_render_diagnostics(client, monkeypatch):
    class FailingTranslator:
        async def ask(self, instruction, text):
            raise TransportError("upstream down")

    monkeypatch.setattr(llm_service, "get_translator", lambda: FailingTranslator())
    resp = client.post("/api/pages", json={"url": CHAPTER_URL, "body": "李明"})

    assert resp.status_code == 502
    body = resp.json()
    assert body["name"] == "TransportError"
    assert body["message"] == "upstream down"
    assert "Traceback" in body["stack"]


def test_llm_settings_cache_key(client):
    resp = client.post("/api/settings/llm", json={"provider": "gemini", "api_key": "abcd1234efgh"})
    assert resp.json() == {"ok": True}
    assert get_store().get(settings.credential_key) == "abcd1234efgh"

    info = client.get("/api/settings/llm").json()
    assert info["api_key_set"] is True
    assert info["api_key_masked"] == "abcd…efgh"


def test_command_on_older_session_keeps_names_found_later(client, monkeypatch, fake_translator):
    names_by_chapter = {
        "李明来了。": '[{"original": "李明", "translated": "Li Ming"}]',
        "赵走了。": '[{"original": "赵", "translated": "Zhao"}]',
    }

    class PerChapterTranslator(fake_translator):
        async def ask(self, instruction, text):
            for body, names in names_by_chapter.items():
                if f"Original chapter:\n{body}" in text:
                    self.names = names
            return await super().ask(instruction, text)

    monkeypatch.setattr(llm_service, "get_translator", lambda: PerChapterTranslator())
    first = client.post("/api/pages", json={"url": CHAPTER_URL, "body": "李明来了。"}).json()
    client.post("/api/pages", json={"url": "https://www.69shuba.com/txt/1001/556", "body": "赵走了。"})
    assert [p["original"] for p in client.get("/api/works/1001/names").json()["local"]] == ["李明", "赵"]

    resp = client.post(f"/api/sessions/{first['session_id']}/commands/check", json={"original": "李明"})

    assert resp.json()["applied"] is True
    local = client.get("/api/works/1001/names").json()["local"]
    assert [(p["original"], p["checked"]) for p in local] == [("李明", True), ("赵", False)]


def test_oldest_sessions_are_evicted(client, monkeypatch):
    monkeypatch.setattr(settings, "max_sessions", 2)
    sids = [_translate_chapter(client)["session_id"] for _ in range(3)]

    assert client.get(f"/api/sessions/{sids[0]}").status_code == 404
    assert client.get(f"/api/sessions/{sids[1]}").status_code == 200
    assert client.get(f"/api/sessions/{sids[2]}").status_code == 200


def test_invalid_persisted_names_render_diagnostics(client):
    get_store().set("names:1001", [{"original": "李明", "translated": ""}])

    resp = client.get("/api/works/1001/names")

    assert resp.status_code == 500
    assert resp.json()["name"] == "StoreError"
    assert "names:1001" in resp.json()["message"]
