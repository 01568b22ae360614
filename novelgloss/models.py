from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ── Enums ───────────────────────────────────────────────────────────────

class ConflictState(str, Enum):
    NONE = "none"
    EXACT_OVERLAP = "exact_overlap"
    PARTIAL_OVERLAP = "partial_overlap"
    GLOBAL = "global"
    MANUALLY_CHECKED = "manually_checked"


class PageKind(str, Enum):
    BOOK = "book"
    CHAPTER = "chapter"


class CurationCommand(str, Enum):
    PROMOTE = "promote"
    RENAME = "rename"
    CHECK = "check"
    DELETE = "delete"
    COPY = "copy"


# ── Glossary ────────────────────────────────────────────────────────────

class NamePair(BaseModel):
    """A source-language proper noun and its translated form."""
    model_config = ConfigDict(str_strip_whitespace=True)

    original: str = Field(min_length=1)
    translated: str = Field(min_length=1)
    checked: bool = False


# ── API Request / Response Models ───────────────────────────────────────

class LLMSettings(BaseModel):
    provider: str = "gemini"
    api_key: str = ""
    base_url: str = ""
    model: str = "gemini-2.0-flash"
    temperature: float = 0.3


class PageRequest(BaseModel):
    url: str
    title: str = ""
    synopsis: str = ""
    body: str = ""


class MetadataOut(BaseModel):
    work_id: str
    title: str
    synopsis: str


class ChapterOut(BaseModel):
    session_id: str
    work_id: str
    translated: str
    markup: str
    added_names: int = 0
    extraction_error: Optional[str] = None


class CommandRequest(BaseModel):
    selection: str = ""        # HTML fragment of the user's selection
    original: str = ""         # direct lookup key, used when no selection is sent
    new_translated: Optional[str] = None


class CommandOut(BaseModel):
    applied: bool
    markup: str
    clipboard: Optional[str] = None


class GlossaryOut(BaseModel):
    work_id: str
    local: list[NamePair] = []
    global_: list[NamePair] = Field(default=[], alias="global")

    model_config = ConfigDict(populate_by_name=True)
