from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make package importable when running tests from the project root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from novelgloss.database import KeyValueStore  # noqa: E402
from novelgloss.models import NamePair  # noqa: E402
from novelgloss.services.extraction_service import EXTRACTION_SYSTEM  # noqa: E402
from novelgloss.services.glossary_service import GlossaryStore  # noqa: E402


class FakeTranslator:
    """Answers extraction requests with ``names`` and translates with ``translate``."""

    def __init__(self, translate=None, names: str = "[]"):
        self.translate = translate or (lambda text: f"EN<{text}>")
        self.names = names
        self.calls: list[tuple[str, str]] = []

    async def ask(self, instruction: str, text: str) -> str:
        self.calls.append((instruction, text))
        if instruction == EXTRACTION_SYSTEM:
            return self.names
        return self.translate(text)


@pytest.fixture
def kv(tmp_path) -> KeyValueStore:
    store = KeyValueStore(tmp_path / "kv.db")
    store.init()
    return store


@pytest.fixture
def store(kv) -> GlossaryStore:
    glossary = GlossaryStore(kv)
    glossary.load("1001")
    return glossary


@pytest.fixture
def fake_translator():
    return FakeTranslator


def pair(original: str, translated: str, checked: bool = False) -> NamePair:
    return NamePair(original=original, translated=translated, checked=checked)


@pytest.fixture
def make_pair():
    return pair
