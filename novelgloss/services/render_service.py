"""Annotated HTML rendering of translated text with conflict-coloured names."""
from __future__ import annotations

import html
from typing import Iterable, Optional

from ..models import ConflictState, NamePair
from .conflict_service import classify, needs_attention

COLOR = {
    "RED": "#f8d7da",
    "GREEN": "#d4edda",
    "BLUE": "#afcde9",
    "ORANGE": "#ffe5b4",
}

STATE_COLOR = {
    ConflictState.NONE: COLOR["RED"],
    ConflictState.EXACT_OVERLAP: COLOR["GREEN"],
    ConflictState.GLOBAL: COLOR["GREEN"],
    ConflictState.PARTIAL_OVERLAP: COLOR["ORANGE"],
    ConflictState.MANUALLY_CHECKED: COLOR["BLUE"],
}

ATTENTION_MARKER = "*"

# A segment is (text, pair); pair is None for text not yet annotated.
_Segment = tuple[str, Optional[NamePair]]


def _annotate(segments: list[_Segment], pair: NamePair) -> list[_Segment]:
    needle = pair.translated
    out: list[_Segment] = []
    for text, owner in segments:
        if owner is not None or needle not in text:
            out.append((text, owner))
            continue
        parts = text.split(needle)
        for i, part in enumerate(parts):
            if i:
                out.append((needle, pair))
            if part:
                out.append((part, None))
    return out


def _span(pair: NamePair, state: ConflictState) -> str:
    marker = ATTENTION_MARKER if needs_attention(state) else ""
    return (
        f'<span style="background-color: {STATE_COLOR[state]}; user-select: all;" '
        f'data-original="{html.escape(pair.original, quote=True)}">'
        f"{html.escape(pair.translated, quote=False)}{marker}</span>"
    )


def _plain(text: str) -> str:
    return html.escape(text, quote=False).replace("\n", "<br>")


def render(
    translated_text: str,
    pairs: Iterable[NamePair],
    global_pairs: Iterable[NamePair],
) -> str:
    """Wrap each known translated name in a conflict-coloured span.

    Longest translated names are matched first and annotated text is never
    matched again, so nested names do not corrupt each other. The input is
    always the plain translated text, which makes the output idempotent.
    """
    global_pairs = list(global_pairs)
    ordered = sorted(pairs, key=lambda p: len(p.translated), reverse=True)

    segments: list[_Segment] = [(translated_text, None)]
    for pair in ordered:
        if pair.translated:
            segments = _annotate(segments, pair)

    states: dict[int, ConflictState] = {}
    chunks = []
    for text, pair in segments:
        if pair is None:
            chunks.append(_plain(text))
            continue
        key = id(pair)
        if key not in states:
            states[key] = classify(pair, global_pairs)
        chunks.append(_span(pair, states[key]))
    return "".join(chunks)
