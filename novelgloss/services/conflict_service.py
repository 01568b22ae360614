"""Conflict classification of a name pair against the global glossary."""
from __future__ import annotations

from typing import Iterable

from ..models import ConflictState, NamePair

_ATTENTION_STATES = (ConflictState.EXACT_OVERLAP, ConflictState.PARTIAL_OVERLAP)


def classify(pair: NamePair, global_pairs: Iterable[NamePair]) -> ConflictState:
    """Return how ``pair`` relates to the global names.

    A local name contained in a global name signals likely ambiguity; when the
    translated forms are contained too the two are at least consistent.
    """
    if pair.checked:
        return ConflictState.MANUALLY_CHECKED

    global_pairs = list(global_pairs)
    if any(g.original == pair.original for g in global_pairs):
        return ConflictState.GLOBAL

    partial = False
    for g in global_pairs:
        if pair.original in g.original:
            if pair.translated in g.translated:
                return ConflictState.EXACT_OVERLAP
            partial = True

    return ConflictState.PARTIAL_OVERLAP if partial else ConflictState.NONE


def needs_attention(state: ConflictState) -> bool:
    return state in _ATTENTION_STATES
