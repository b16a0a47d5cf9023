"""
DUKA Daily Form Engine — Repository
======================================
Storage contract for daily form documents plus the in-memory store.

Concurrency model:
- (business_id, date, shift) is unique; the store is the only guard.
  Two concurrent creates for one key: exactly one wins, the other
  gets FormConflictError.
- Saves are last-write-wins unless the caller passes
  expected_version, in which case a stale version is a conflict.
- Every successful save bumps the stored version by one.
- By default a save is refused once the stored form has left
  draft; a stale draft write never undoes a submission.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, replace
from datetime import date
from typing import Optional, Protocol

from engines.daily_forms.errors import (
    FormConflictError,
    FormNotFoundError,
    InvalidStateError,
)
from engines.daily_forms.models import SHIFT_ORDER, DailyForm, FormKey, FormStatus


@dataclass(frozen=True)
class FormPage:
    forms: tuple[DailyForm, ...]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "page": self.page,
            "pages": self.pages,
            "forms": [form.to_dict() for form in self.forms],
        }


class DailyFormRepository(Protocol):
    def add(self, form: DailyForm) -> DailyForm:
        ...

    def get(self, business_id: uuid.UUID, form_id: str) -> Optional[DailyForm]:
        ...

    def find_by_key(self, key: FormKey) -> Optional[DailyForm]:
        ...

    def save(
        self,
        form: DailyForm,
        expected_version: Optional[int] = None,
        require_draft: bool = True,
    ) -> DailyForm:
        ...

    def delete(self, business_id: uuid.UUID, form_id: str) -> bool:
        ...

    def page_for_business(
        self,
        business_id: uuid.UUID,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[tuple[DailyForm, ...], int]:
        ...


def listing_sort_key(form: DailyForm) -> tuple:
    """Newest day first; within a day, Morning before Evening."""
    return (-form.date.toordinal(), SHIFT_ORDER[form.shift], form.form_id)


def check_expected_version(current: DailyForm, expected_version: Optional[int]) -> None:
    if expected_version is not None and current.version != expected_version:
        raise FormConflictError(
            "Daily form was changed by someone else. Reload and try again.",
            details={
                "form_id": current.form_id,
                "expected_version": expected_version,
                "current_version": current.version,
            },
        )


def check_stored_draft(form_id: str, stored_status: FormStatus, require_draft: bool) -> None:
    """Refuse a write over a stored form that is no longer a draft."""
    if require_draft and stored_status != FormStatus.DRAFT:
        raise InvalidStateError(
            "Cannot edit a submitted/locked form",
            details={"form_id": form_id, "status": stored_status.value},
        )


class InMemoryDailyFormRepository:
    """Thread-safe in-memory document store. Forms are frozen, so no copies are needed."""

    def __init__(self):
        self._forms: dict[str, DailyForm] = {}
        self._ids_by_key: dict[FormKey, str] = {}
        self._lock = threading.Lock()

    def add(self, form: DailyForm) -> DailyForm:
        with self._lock:
            if form.key in self._ids_by_key:
                raise FormConflictError(
                    "Daily form already exists for this date/shift.",
                    details={"date": form.date.isoformat(), "shift": form.shift.value},
                )
            if form.form_id in self._forms:
                raise FormConflictError(
                    f"Daily form id '{form.form_id}' already exists.",
                    details={"form_id": form.form_id},
                )
            self._forms[form.form_id] = form
            self._ids_by_key[form.key] = form.form_id
            return form

    def get(self, business_id: uuid.UUID, form_id: str) -> Optional[DailyForm]:
        with self._lock:
            form = self._forms.get(form_id)
        if form is None or form.business_id != business_id:
            return None
        return form

    def find_by_key(self, key: FormKey) -> Optional[DailyForm]:
        with self._lock:
            form_id = self._ids_by_key.get(key)
            return None if form_id is None else self._forms[form_id]

    def save(
        self,
        form: DailyForm,
        expected_version: Optional[int] = None,
        require_draft: bool = True,
    ) -> DailyForm:
        with self._lock:
            current = self._forms.get(form.form_id)
            if current is None or current.business_id != form.business_id:
                raise FormNotFoundError(
                    "Daily form not found", details={"form_id": form.form_id}
                )
            check_stored_draft(form.form_id, current.status, require_draft)
            check_expected_version(current, expected_version)
            stored = replace(form, version=current.version + 1)
            self._forms[form.form_id] = stored
            return stored

    def delete(self, business_id: uuid.UUID, form_id: str) -> bool:
        with self._lock:
            form = self._forms.get(form_id)
            if form is None or form.business_id != business_id:
                return False
            del self._forms[form_id]
            self._ids_by_key.pop(form.key, None)
            return True

    def page_for_business(
        self,
        business_id: uuid.UUID,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[tuple[DailyForm, ...], int]:
        with self._lock:
            matching = [
                form
                for form in self._forms.values()
                if form.business_id == business_id
                and (start_date is None or form.date >= start_date)
                and (end_date is None or form.date <= end_date)
            ]
        matching.sort(key=listing_sort_key)
        return tuple(matching[offset:offset + limit]), len(matching)
