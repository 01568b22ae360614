"""API routes for LLM settings and page translation."""
from __future__ import annotations

import logging
from collections import OrderedDict

from fastapi import APIRouter, HTTPException

from ..database import get_store
from ..models import ChapterOut, LLMSettings, MetadataOut, PageKind, PageRequest
from ..config import settings
from ..services import llm_service, translation_service
from ..services.glossary_service import GlossaryStore
from ..services.page_service import Page

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["translation"])

# Chapter sessions kept for curation commands, keyed by session id, least recently used first
_sessions: OrderedDict[str, translation_service.ChapterSession] = OrderedDict()


def remember_session(session: translation_service.ChapterSession) -> None:
    _sessions[session.id] = session
    _sessions.move_to_end(session.id)
    while len(_sessions) > max(settings.max_sessions, 1):
        evicted, _ = _sessions.popitem(last=False)
        log.info("Evicted chapter session %s", evicted)


def get_session(session_id: str) -> translation_service.ChapterSession:
    session = _sessions.get(session_id)
    if session is None:
        raise HTTPException(404, "Session not found")
    _sessions.move_to_end(session_id)
    return session


# ── LLM Settings ────────────────────────────────────────────────────────

@router.get("/settings/llm")
async def get_llm_settings():
    """Return current LLM settings (API key masked for security)."""
    from ..services.llm_service import _runtime
    provider = _runtime.get("provider", settings.llm_provider)
    api_key = llm_service.cached_api_key()

    masked_key = ""
    if api_key:
        masked_key = api_key[:4] + "…" + api_key[-4:] if len(api_key) > 8 else "****"

    return {
        "provider": provider,
        "api_key_masked": masked_key,
        "api_key_set": bool(api_key),
        "base_url": _runtime.get("base_url", settings.llm_base_url),
        "model": _runtime.get("model", settings.llm_model),
        "temperature": _runtime.get("temperature", settings.llm_temperature),
    }


@router.post("/settings/llm")
async def update_llm_settings(s: LLMSettings):
    llm_service.configure(
        provider=s.provider,
        base_url=s.base_url,
        model=s.model,
        temperature=s.temperature,
    )
    # "__KEEP__" or an empty key preserves the cached one
    if s.api_key and s.api_key != "__KEEP__":
        llm_service.store_api_key(s.api_key.strip())
    return {"ok": True}


# ── Pages ───────────────────────────────────────────────────────────────

@router.post("/pages")
async def translate_page(req: PageRequest):
    page = Page(url=req.url, title=req.title, synopsis=req.synopsis, body=req.body)
    try:
        kind = page.kind
        work_id = page.work_id
    except ValueError as e:
        raise HTTPException(400, str(e))

    store = GlossaryStore(get_store())
    store.load(work_id)
    translator = llm_service.get_translator()

    if kind == PageKind.BOOK:
        await translation_service.translate_metadata(page, store, translator)
        return MetadataOut(work_id=work_id, title=page.translated_title,
                           synopsis=page.translated_synopsis)

    if not page.body.strip():
        raise HTTPException(400, "Chapter body is empty")

    session = await translation_service.translate_chapter(page, store, translator)
    remember_session(session)
    return ChapterOut(
        session_id=session.id,
        work_id=work_id,
        translated=session.translated_text,
        markup=session.markup,
        added_names=session.added_names,
        extraction_error=session.extraction_error,
    )


@router.get("/sessions/{session_id}")
async def get_session_markup(session_id: str):
    session = get_session(session_id)
    return {"session_id": session.id, "work_id": session.work_id, "markup": session.markup}
