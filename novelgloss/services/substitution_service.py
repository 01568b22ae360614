"""Literal, longest-first substitution of glossary names into text."""
from __future__ import annotations

from typing import Iterable

from ..models import NamePair


def substitute(text: str, pairs: Iterable[NamePair]) -> str:
    """Replace every occurrence of each ``original`` with its ``translated``.

    Longer originals go first so a phrase is replaced whole before any shorter
    name inside it. Replacements are applied one after another on the running
    result: a shorter original can still match inside an earlier replacement.
    Matching is plain substring search, not word-bounded.
    """
    ordered = sorted(pairs, key=lambda p: len(p.original), reverse=True)
    for pair in ordered:
        if not pair.original:
            continue
        text = text.replace(pair.original, pair.translated)
    return text
