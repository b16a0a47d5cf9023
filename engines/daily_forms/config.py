"""
DUKA Daily Form Engine — Configuration
=========================================
Engine knobs, built from the DAILY_FORMS settings mapping.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

STORE_MEMORY = "memory"
STORE_DB = "db"
VALID_STORES = frozenset({STORE_MEMORY, STORE_DB})


@dataclass(frozen=True)
class DailyFormEngineConfig:
    """
    Fields:
        store:               "memory" or "db" repository backend.
        strict_patch_fields: Reject patches carrying non-writable fields
                             instead of silently dropping them.
        default_page_size:   List page size when none is requested.
        max_page_size:       Upper bound on requested page size.
    """

    store: str = STORE_MEMORY
    strict_patch_fields: bool = False
    default_page_size: int = 20
    max_page_size: int = 100

    def __post_init__(self):
        if self.store not in VALID_STORES:
            raise ValueError(
                f"store '{self.store}' not valid. Must be one of: {sorted(VALID_STORES)}"
            )
        if not isinstance(self.default_page_size, int) or self.default_page_size < 1:
            raise ValueError("default_page_size must be int >= 1.")
        if not isinstance(self.max_page_size, int) or self.max_page_size < self.default_page_size:
            raise ValueError("max_page_size must be int >= default_page_size.")

    @classmethod
    def from_settings(cls, raw: Optional[Mapping[str, Any]]) -> "DailyFormEngineConfig":
        raw = dict(raw or {})
        return cls(
            store=str(raw.get("STORE", STORE_MEMORY)).strip().lower(),
            strict_patch_fields=bool(raw.get("STRICT_PATCH_FIELDS", False)),
            default_page_size=int(raw.get("DEFAULT_PAGE_SIZE", 20)),
            max_page_size=int(raw.get("MAX_PAGE_SIZE", 100)),
        )
