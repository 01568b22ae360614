"""Two-scope name glossary (work-local and global) backed by the kv store."""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from pydantic import ValidationError

from ..database import KeyValueStore
from ..exceptions import StoreError
from ..models import NamePair

log = logging.getLogger(__name__)

GLOBAL_KEY = "names"


def local_key(work_id: str) -> str:
    return f"{GLOBAL_KEY}:{work_id}"


def _find(pairs: list[NamePair], original: str) -> int:
    for i, p in enumerate(pairs):
        if p.original == original:
            return i
    return -1


class GlossaryStore:
    """Local and global name pairs for one work.

    Lookups consult local before global, so a local entry shadows a global
    one with the same ``original``. Every mutation persists both scopes.
    """

    def __init__(self, kv: KeyValueStore):
        self.kv = kv
        self.work_id: Optional[str] = None
        self._local: list[NamePair] = []
        self._global: list[NamePair] = []

    # ── Loading / saving ────────────────────────────────────────────────

    def _read(self, key: str) -> list[NamePair]:
        try:
            return [NamePair.model_validate(d) for d in self.kv.get(key) or []]
        except ValidationError as e:
            raise StoreError(f"Invalid name entry under key '{key}'",
                             details={"errors": e.errors(include_url=False)}) from e

    def load(self, work_id: str) -> None:
        self.work_id = work_id
        self._local = self._read(local_key(work_id))
        self._global = self._read(GLOBAL_KEY)
        log.info("Loaded glossary for work %s: %d local, %d global",
                 work_id, len(self._local), len(self._global))

    def persist(self) -> None:
        if self.work_id is None:
            raise RuntimeError("GlossaryStore.load() must be called before persisting")
        self.kv.set(local_key(self.work_id), [p.model_dump() for p in self._local])
        self.kv.set(GLOBAL_KEY, [p.model_dump() for p in self._global])

    # ── Queries ─────────────────────────────────────────────────────────

    def lookup(self, original: Optional[str]) -> Optional[NamePair]:
        if not original:
            return None
        for p in self.effective_pairs():
            if p.original == original:
                return p
        return None

    def effective_pairs(self) -> list[NamePair]:
        return [*self._local, *self._global]

    def local_pairs(self) -> list[NamePair]:
        return list(self._local)

    def global_pairs(self) -> list[NamePair]:
        return list(self._global)

    # ── Mutations ───────────────────────────────────────────────────────

    def add_if_absent(self, pairs: Iterable[NamePair]) -> list[NamePair]:
        added = []
        for pair in pairs:
            if self.lookup(pair.original) is None:
                self._local.append(pair)
                added.append(pair)
        self.persist()
        if added:
            log.info("Added %d new local name(s) to work %s", len(added), self.work_id)
        return added

    def promote(self, original: str) -> bool:
        idx = _find(self._local, original)
        if idx == -1:
            return False
        pair = self._local.pop(idx)
        existing = _find(self._global, original)
        if existing != -1:
            self._global[existing] = pair
        else:
            self._global.append(pair)
        self.persist()
        log.info("Promoted '%s' → '%s' to the global glossary", pair.original, pair.translated)
        return True

    def remove(self, original: str) -> bool:
        removed = False
        for scope in (self._local, self._global):
            idx = _find(scope, original)
            if idx != -1:
                del scope[idx]
                removed = True
        if removed:
            self.persist()
        return removed

    def set_translated(self, original: str, new_translated: str) -> bool:
        pair = self.lookup(original)
        if pair is None:
            return False
        pair.translated = new_translated
        self.persist()
        return True

    def set_checked(self, original: str) -> bool:
        pair = self.lookup(original)
        if pair is None:
            return False
        pair.checked = True
        self.persist()
        return True
