"""
DUKA HTTP API - Contracts
=========================
Framework-agnostic request/response DTOs for daily form and product endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional


def _require_form_id(form_id) -> None:
    if not form_id or not isinstance(form_id, str):
        raise ValueError("form_id must be a non-empty string.")


def _require_optional_version(version) -> None:
    if version is None:
        return
    if isinstance(version, bool) or not isinstance(version, int) or version < 1:
        raise ValueError("version must be a positive integer or None.")


@dataclass(frozen=True)
class DailyFormCreateHttpRequest:
    date: str
    shift: Optional[str] = None
    product_ids: Optional[tuple[str, ...]] = None

    def __post_init__(self):
        if not self.date or not isinstance(self.date, str):
            raise ValueError("date is required.")
        if self.shift is not None and not isinstance(self.shift, str):
            raise ValueError("shift must be a string or None.")
        if self.product_ids is not None:
            if not isinstance(self.product_ids, tuple):
                raise ValueError("productIds must be a list.")
            for product_id in self.product_ids:
                if not product_id or not isinstance(product_id, str):
                    raise ValueError("productIds entries must be non-empty strings.")


@dataclass(frozen=True)
class DailyFormDraftHttpRequest:
    date: str
    shift: Optional[str] = None

    def __post_init__(self):
        if not self.date or not isinstance(self.date, str):
            raise ValueError("date is required.")
        if self.shift is not None and not isinstance(self.shift, str):
            raise ValueError("shift must be a string or None.")


@dataclass(frozen=True)
class DailyFormPreviewHttpRequest:
    form: dict[str, Any]

    def __post_init__(self):
        if not isinstance(self.form, dict):
            raise ValueError("form must be an object.")


@dataclass(frozen=True)
class DailyFormListHttpRequest:
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    page: int = 1
    limit: Optional[int] = None

    def __post_init__(self):
        for name in ("start_date", "end_date"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, date):
                raise ValueError(f"{name} must be a date or None.")
        if isinstance(self.page, bool) or not isinstance(self.page, int):
            raise ValueError("page must be an integer.")
        if self.limit is not None and (
            isinstance(self.limit, bool) or not isinstance(self.limit, int)
        ):
            raise ValueError("limit must be an integer or None.")


@dataclass(frozen=True)
class DailyFormRefHttpRequest:
    form_id: str

    def __post_init__(self):
        _require_form_id(self.form_id)


@dataclass(frozen=True)
class DailyFormPatchHttpRequest:
    form_id: str
    patch: dict[str, Any] = field(default_factory=dict)
    version: Optional[int] = None

    def __post_init__(self):
        _require_form_id(self.form_id)
        if not isinstance(self.patch, dict):
            raise ValueError("patch must be an object.")
        _require_optional_version(self.version)


@dataclass(frozen=True)
class DailyFormSubmitHttpRequest:
    form_id: str
    patch: dict[str, Any] = field(default_factory=dict)
    version: Optional[int] = None

    def __post_init__(self):
        _require_form_id(self.form_id)
        if not isinstance(self.patch, dict):
            raise ValueError("patch must be an object.")
        _require_optional_version(self.version)


def _require_product_id(product_id) -> None:
    if not product_id or not isinstance(product_id, str):
        raise ValueError("product_id must be a non-empty string.")


@dataclass(frozen=True)
class ProductListHttpRequest:
    active: Optional[bool] = True
    search: str = ""

    def __post_init__(self):
        if self.active is not None and not isinstance(self.active, bool):
            raise ValueError("active must be a bool or None.")
        if not isinstance(self.search, str):
            raise ValueError("search must be a string.")


@dataclass(frozen=True)
class ProductRefHttpRequest:
    product_id: str

    def __post_init__(self):
        _require_product_id(self.product_id)


@dataclass(frozen=True)
class ProductCreateHttpRequest:
    fields: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.fields, dict):
            raise ValueError("product must be an object.")


@dataclass(frozen=True)
class ProductUpdateHttpRequest:
    product_id: str
    fields: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        _require_product_id(self.product_id)
        if not isinstance(self.fields, dict):
            raise ValueError("product must be an object.")


@dataclass(frozen=True)
class HttpApiErrorBody:
    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class HttpApiResponse:
    ok: bool
    data: Any = None
    error: Optional[HttpApiErrorBody] = None
    meta: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            payload = {"ok": True, "data": self.data}
            if self.meta:
                payload["meta"] = dict(self.meta)
            return payload
        if self.error is None:
            raise ValueError("error must be set when ok is False.")
        return {"ok": False, "error": self.error.to_dict()}
