"""Curator commands acting on the name pair behind the user's selection."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from ..models import CurationCommand, NamePair
from .translation_service import ChapterSession

log = logging.getLogger(__name__)

TextPrompt = Callable[[], Optional[str]]
ClipboardSink = Callable[[str], None]


class CurationCommands:
    """Every command is a no-op returning False when ``pair`` is None."""

    def __init__(self, session: ChapterSession):
        self.session = session
        self.store = session.store

    def promote(self, pair: Optional[NamePair]) -> bool:
        if pair is None:
            return False
        if not self.store.promote(pair.original):
            return False
        self.session.refresh()
        return True

    def rename(self, pair: Optional[NamePair], prompt: TextPrompt) -> bool:
        if pair is None:
            return False
        new_name = (prompt() or "").strip()
        if not new_name:
            return False

        old_name = pair.translated
        self.store.set_translated(pair.original, new_name)
        self.session.translated_text = self.session.translated_text.replace(old_name, new_name)
        log.info("Renamed '%s': '%s' → '%s'", pair.original, old_name, new_name)
        self.session.refresh()
        return True

    def mark_checked(self, pair: Optional[NamePair]) -> bool:
        if pair is None:
            return False
        self.store.set_checked(pair.original)
        self.session.refresh()
        return True

    def copy(self, pair: Optional[NamePair], clipboard: ClipboardSink) -> bool:
        if pair is None:
            return False
        clipboard(pair.original)
        return True

    def delete(self, pair: Optional[NamePair]) -> bool:
        if pair is None:
            return False
        self.store.remove(pair.original)
        self.session.refresh()
        return True

    def dispatch(
        self,
        command: CurationCommand,
        pair: Optional[NamePair],
        prompt: Optional[TextPrompt] = None,
        clipboard: Optional[ClipboardSink] = None,
    ) -> bool:
        if command == CurationCommand.PROMOTE:
            return self.promote(pair)
        if command == CurationCommand.RENAME:
            return self.rename(pair, prompt or (lambda: None))
        if command == CurationCommand.CHECK:
            return self.mark_checked(pair)
        if command == CurationCommand.DELETE:
            return self.delete(pair)
        if command == CurationCommand.COPY:
            return self.copy(pair, clipboard or (lambda _text: None))
        raise ValueError(f"Unknown command: {command}")
