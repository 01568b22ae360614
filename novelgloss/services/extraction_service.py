"""Proper-noun pair discovery from an original/translated chapter."""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from ..exceptions import ExtractionParseError
from ..models import NamePair
from .glossary_service import GlossaryStore

log = logging.getLogger(__name__)

EXTRACTION_SYSTEM = (
    "You are professional JSON extractor. Extract all proper nouns from the original "
    "and translated chapters. Create a JSON array using this format: "
    '[{"original":"proper noun from original chapter",'
    '"translated":"proper noun from translated chapter"}]'
)

EXTRACTION_USER = """\
Original chapter:
{original}

Translated chapter:
{translated}"""

_FENCE_RE = re.compile(r"```json|```")

_PAIRS = TypeAdapter(list[NamePair])


def parse_name_pairs(raw: str) -> list[NamePair]:
    """Parse the extractor's reply, tolerating code fences around the JSON."""
    payload = _FENCE_RE.sub("", raw or "").strip()
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ExtractionParseError(f"Extractor reply is not JSON: {e}") from e
    if not isinstance(data, list) or not all(isinstance(d, dict) for d in data):
        raise ExtractionParseError("Extractor reply is not a JSON array of objects")
    try:
        return _PAIRS.validate_python([{"original": d.get("original"), "translated": d.get("translated")}
                                       for d in data])
    except ValidationError as e:
        raise ExtractionParseError(
            "Extractor reply has entries without original/translated text",
            details={"errors": e.errors(include_url=False)},
        ) from e


@dataclass
class ExtractionResult:
    pairs: list[NamePair] = field(default_factory=list)
    added: list[NamePair] = field(default_factory=list)
    error: Optional[str] = None


class NameExtractionPipeline:
    def __init__(self, translator, store: GlossaryStore):
        self.translator = translator
        self.store = store

    @staticmethod
    def build_request(original_text: str, translated_text: str) -> tuple[str, str]:
        return EXTRACTION_SYSTEM, EXTRACTION_USER.format(
            original=original_text, translated=translated_text,
        )

    async def extract(self, original_text: str, translated_text: str) -> list[NamePair]:
        instruction, user = self.build_request(original_text, translated_text)
        raw = await self.translator.ask(instruction, user)
        pairs = parse_name_pairs(raw)
        self.store.add_if_absent(pairs)
        return pairs

    async def discover(self, original_text: str, translated_text: str) -> ExtractionResult:
        """Like extract(), but a malformed reply leaves the glossary as it was."""
        instruction, user = self.build_request(original_text, translated_text)
        raw = await self.translator.ask(instruction, user)
        try:
            pairs = parse_name_pairs(raw)
        except ExtractionParseError as e:
            log.warning("Discarding name extraction result: %s", e)
            log.debug("Raw extractor output (first 500 chars): %s", (raw or "")[:500])
            return ExtractionResult(error=str(e))
        added = self.store.add_if_absent(pairs)
        return ExtractionResult(pairs=pairs, added=added)
