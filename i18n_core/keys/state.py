"""Per-run key generation state."""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field

from i18n_core.keys.slug import format_i18n_key

logger = logging.getLogger("i18n_extract.keys")


@dataclass
class ExtractorState:
    """Key registry for one extraction run.

    Identical text always maps to the same key within a run, and two different
    texts never share one. A state must not be reused across runs.
    """

    key_prefix: str = ""
    max_key_length: int = 32
    keys_by_text: dict[str, str] = field(default_factory=dict)
    candidate_counts: dict[str, int] = field(default_factory=dict)
    _issued: set[str] = field(default_factory=set, repr=False)

    def generate_unique_key(self, text: str) -> str:
        existing = self.keys_by_text.get(text)
        if existing is not None:
            return existing

        candidate = format_i18n_key(text, "_", self.max_key_length)
        if not candidate:
            candidate = "text_" + hashlib.sha1(text.encode("utf-8")).hexdigest()[:8]

        key = candidate
        if candidate in self.candidate_counts or candidate in self._issued:
            count = self.candidate_counts.get(candidate, 1)
            while True:
                count += 1
                key = f"{candidate}_{count}"
                if key not in self._issued:
                    break
            self.candidate_counts[candidate] = count
            logger.warning("Key collision for '%s': renamed to '%s'", candidate, key)
        else:
            self.candidate_counts[candidate] = 1

        self._issued.add(key)
        if self.key_prefix:
            key = f"{self.key_prefix}.{key}"
        self.keys_by_text[text] = key
        return key

    @property
    def key_count(self) -> int:
        return len(self.keys_by_text)
