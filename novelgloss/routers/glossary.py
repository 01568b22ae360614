"""API routes for glossary inspection and curation commands."""
from __future__ import annotations

import logging

from fastapi import APIRouter

from ..database import get_store
from ..models import CommandOut, CommandRequest, CurationCommand, GlossaryOut
from ..services.curation_service import CurationCommands
from ..services.glossary_service import GlossaryStore
from ..services.page_service import resolve_selection
from .translation import get_session

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["glossary"])


@router.get("/works/{work_id}/names", response_model=GlossaryOut)
async def list_names(work_id: str):
    store = GlossaryStore(get_store())
    store.load(work_id)
    return GlossaryOut(work_id=work_id, local=store.local_pairs(), global_=store.global_pairs())


@router.post("/sessions/{session_id}/commands/{command}", response_model=CommandOut)
async def run_command(session_id: str, command: CurationCommand, req: CommandRequest):
    session = get_session(session_id)
    session.reload()
    original = resolve_selection(req.selection) if req.selection else req.original
    pair = session.store.lookup(original)

    copied: list[str] = []
    applied = CurationCommands(session).dispatch(
        command,
        pair,
        prompt=lambda: req.new_translated,
        clipboard=copied.append,
    )
    if not applied:
        log.debug("Command %s ignored: no name resolved from selection", command.value)
    return CommandOut(applied=applied, markup=session.markup,
                      clipboard=copied[0] if copied else None)
