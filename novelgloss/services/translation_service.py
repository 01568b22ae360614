"""Page translation workflows: book metadata pages and glossary-directed chapters."""
from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Optional

from ..config import settings
from .extraction_service import NameExtractionPipeline
from .glossary_service import GlossaryStore
from .page_service import Page
from .render_service import render
from .substitution_service import substitute

log = logging.getLogger(__name__)

_TRANSLATOR_ROLE = "You are a professional {source_lang}-to-{target_lang} translator."

TITLE_SYSTEM = _TRANSLATOR_ROLE + " Translate this {source_lang} novel title. Output only the translated title."

SYNOPSIS_SYSTEM = _TRANSLATOR_ROLE + \
    " Translate this {source_lang} novel synopsis. Output only the translated synopsis."

CHAPTER_SYSTEM = _TRANSLATOR_ROLE + \
    " Translate this {source_lang} novel chapter. Output only the translated chapter."


def _prompt(template: str) -> str:
    return template.format(source_lang=settings.source_language,
                           target_lang=settings.target_language)


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class ChapterSession:
    """One translated chapter and the glossary it was rendered with."""
    work_id: str
    store: GlossaryStore
    original_text: str
    translated_text: str = ""
    markup: str = ""
    extraction_error: Optional[str] = None
    added_names: int = 0
    page: Optional[Page] = None
    id: str = field(default_factory=_new_id)

    def reload(self) -> None:
        """Re-read the glossary so a command sees names persisted since translation."""
        self.store.load(self.work_id)

    def refresh(self) -> str:
        self.markup = render(self.translated_text, self.store.effective_pairs(),
                             self.store.global_pairs())
        if self.page is not None:
            self.page.replace_body(self.markup)
        return self.markup


async def translate_metadata(page: Page, store: GlossaryStore, translator) -> Page:
    """Translate a book page's title and synopsis using global names only."""
    names = store.global_pairs()
    title = substitute(page.title.strip(), names)
    synopsis = substitute(page.synopsis.strip(), names)

    translated_title, translated_synopsis = await asyncio.gather(
        translator.ask(_prompt(TITLE_SYSTEM), title),
        translator.ask(_prompt(SYNOPSIS_SYSTEM), synopsis),
    )
    page.replace_title(translated_title)
    page.replace_synopsis(translated_synopsis)
    log.info("Translated metadata for work %s", page.work_id)
    return page


async def translate_chapter(page: Page, store: GlossaryStore, translator) -> ChapterSession:
    """Substitute known names, translate, discover new names, and render."""
    original = page.body.strip()
    prepared = substitute(original, store.effective_pairs())

    translated = await translator.ask(_prompt(CHAPTER_SYSTEM), prepared)

    session = ChapterSession(
        work_id=page.work_id,
        store=store,
        original_text=original,
        translated_text=translated,
        page=page,
    )

    result = await NameExtractionPipeline(translator, store).discover(original, translated)
    session.extraction_error = result.error
    session.added_names = len(result.added)

    session.refresh()
    log.info("Translated chapter of work %s: %d chars → %d chars, %d new name(s)",
             session.work_id, len(original), len(translated), session.added_names)
    return session
