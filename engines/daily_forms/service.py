"""
DUKA Daily Form Engine — Lifecycle Service
=============================================
Creation, draft editing, submission and deletion of daily forms.

Flow of every write:
    role check → state check → policy filter → merge
    → recompute (calculator) → [validate on submit] → persist → audit

States:
    draft ──submit──▶ submitted
    locked exists in the schema but nothing transitions into it;
    it is treated exactly like submitted.

Nothing is persisted when any step fails.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date
from typing import Any, Callable, Iterable, Mapping, Optional

from core.audit import (
    AUDIT_ACTION_CREATE,
    AUDIT_ACTION_DELETE,
    AUDIT_ACTION_SUBMIT,
    AUDIT_ACTION_UPDATE,
    AuditSink,
    create_audit_entry,
)
from core.catalog import Product, ProductCatalog
from core.context.actor_context import ActorContext
from core.time.clock import Clock, SystemClock, parse_business_date
from engines.daily_forms.calculator import DerivedValues, compute_derived, compute_values
from engines.daily_forms.config import DailyFormEngineConfig
from engines.daily_forms.errors import (
    ForbiddenError,
    FormConflictError,
    FormNotFoundError,
    InvalidInputError,
    InvalidStateError,
    SubmissionValidationError,
)
from engines.daily_forms.models import (
    CashSummary,
    DailyForm,
    ExpenseEntry,
    FormKey,
    FormStatus,
    ItemRow,
    Shift,
    SupplierEntry,
)
from engines.daily_forms.policy import (
    ACTION_CREATE,
    ACTION_DELETE,
    ACTION_EDIT,
    ACTION_SUBMIT,
    SUBMIT_WRITABLE_FIELDS,
    FilteredPatch,
    check_role_action,
    filter_patch,
    merge_patch,
)
from engines.daily_forms.repository import DailyFormRepository, FormPage
from engines.daily_forms.validator import validate_submission

logger = logging.getLogger("duka.daily_forms")

RECORD_TYPE = "DailyForm"


def _new_form_id() -> str:
    return uuid.uuid4().hex


class DailyFormService:
    """Daily Form Engine application service."""

    def __init__(
        self,
        *,
        repository: DailyFormRepository,
        catalog: ProductCatalog | None = None,
        audit_sink: AuditSink | None = None,
        clock: Clock | None = None,
        config: DailyFormEngineConfig | None = None,
        id_factory: Callable[[], str] = _new_form_id,
    ):
        self._repository = repository
        self._catalog = catalog
        self._audit_sink = audit_sink
        self._clock = clock or SystemClock()
        self._config = config or DailyFormEngineConfig()
        self._id_factory = id_factory

    @property
    def config(self) -> DailyFormEngineConfig:
        return self._config

    # ── guards ────────────────────────────────────────────────

    def _require_action(self, actor: ActorContext, action: str) -> None:
        rejection = check_role_action(actor.role, action)
        if rejection is not None:
            raise ForbiddenError(rejection.message, details=rejection.details)

    def _require_draft(self, form: DailyForm) -> None:
        if form.status != FormStatus.DRAFT:
            raise InvalidStateError(
                "Cannot edit a submitted/locked form",
                details={"form_id": form.form_id, "status": form.status.value},
            )

    def _load(self, business_id: uuid.UUID, form_id: str) -> DailyForm:
        form = self._repository.get(business_id, form_id)
        if form is None:
            raise FormNotFoundError("Daily form not found", details={"form_id": form_id})
        return form

    def _filter(self, actor: ActorContext, form: DailyForm, patch,
                writable=None) -> FilteredPatch:
        filtered = filter_patch(
            actor.role,
            patch or {},
            writable=writable,
            item_codes=frozenset(form.item_codes()),
        )
        if filtered.dropped:
            if self._config.strict_patch_fields:
                raise InvalidInputError(
                    "Patch contains fields this role cannot write.",
                    details={"dropped": list(filtered.dropped), "role": actor.role},
                )
            logger.warning(
                "Dropped non-writable patch fields for role %s: %s",
                actor.role,
                ", ".join(filtered.dropped),
            )
        return filtered

    def _audit(self, actor: ActorContext, action: str, form: DailyForm,
               description: str, metadata: Optional[dict] = None) -> None:
        if self._audit_sink is None:
            return
        self._audit_sink.record(
            create_audit_entry(
                business_id=actor.business_id,
                actor_id=actor.actor_id,
                action=action,
                record_type=RECORD_TYPE,
                record_id=form.form_id,
                occurred_at=self._clock.now_utc(),
                description=description,
                metadata=metadata,
            )
        )

    # ── creation ──────────────────────────────────────────────

    def create(
        self,
        actor: ActorContext,
        form_date,
        shift,
        products: Iterable[Product],
    ) -> DailyForm:
        """Create a draft with one item row per product in the snapshot."""
        self._require_action(actor, ACTION_CREATE)
        day = _parse_day(form_date)
        shift = Shift.parse(shift)

        key = FormKey(business_id=actor.business_id, date=day, shift=shift)
        if self._repository.find_by_key(key) is not None:
            raise FormConflictError(
                "Daily form already exists for this date/shift",
                details={"date": day.isoformat(), "shift": shift.value},
            )

        products = tuple(products)
        if not products:
            raise InvalidInputError("No active products found to create the form.")

        now = self._clock.now_utc()
        form = DailyForm(
            form_id=self._id_factory(),
            business_id=actor.business_id,
            date=day,
            shift=shift,
            recorded_by=actor.actor_id,
            items=tuple(
                ItemRow(item_code=product.item_code, item_name=product.name)
                for product in products
            ),
            created_at=now,
            updated_at=now,
        )
        form = self._repository.add(compute_derived(form))

        logger.info(
            "Daily form %s created for %s (%s) with %d items",
            form.form_id, day.isoformat(), shift.value, len(form.items),
        )
        self._audit(
            actor, AUDIT_ACTION_CREATE, form,
            f"Created daily form from products for {day.isoformat()} ({shift.value})",
        )
        return form

    def create_from_catalog(
        self,
        actor: ActorContext,
        form_date,
        shift,
        product_ids: Optional[Iterable[str]] = None,
    ) -> DailyForm:
        """Snapshot the active catalog (optionally narrowed to product_ids) into a new form."""
        self._require_action(actor, ACTION_CREATE)
        if self._catalog is None:
            raise InvalidInputError("Product catalog is not configured.")
        products = self._catalog.active_products(actor.business_id, product_ids)
        return self.create(actor, form_date, shift, products)

    # ── reads ─────────────────────────────────────────────────

    def load_or_not_found(self, business_id: uuid.UUID, form_date, shift) -> DailyForm:
        """Return the form for the key, recomputed. Never creates one."""
        key = FormKey(
            business_id=business_id,
            date=_parse_day(form_date),
            shift=Shift.parse(shift),
        )
        form = self._repository.find_by_key(key)
        if form is None:
            raise FormNotFoundError(
                "Daily form not created yet. Owner/Manager must create it from Products.",
                details={"date": key.date.isoformat(), "shift": key.shift.value},
            )
        return compute_derived(form)

    def get(self, business_id: uuid.UUID, form_id: str) -> DailyForm:
        return self._load(business_id, form_id)

    def list_forms(
        self,
        business_id: uuid.UUID,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> FormPage:
        if limit is None:
            limit = self._config.default_page_size
        if page < 1:
            raise InvalidInputError("page must be >= 1.", details={"field": "page"})
        if limit < 1:
            raise InvalidInputError("limit must be >= 1.", details={"field": "limit"})
        limit = min(limit, self._config.max_page_size)
        if start_date and end_date and start_date > end_date:
            raise InvalidInputError("startDate must not be after endDate.")

        forms, total = self._repository.page_for_business(
            business_id,
            start_date=start_date,
            end_date=end_date,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return FormPage(forms=forms, total=total, page=page, limit=limit)

    # ── draft editing ─────────────────────────────────────────

    def apply_patch(
        self,
        actor: ActorContext,
        form_id: str,
        patch: Mapping[str, Any],
        expected_version: Optional[int] = None,
    ) -> DailyForm:
        """
        Merge the role-filtered patch into a draft and recompute.

        Repeating the same patch yields the same stored values.
        """
        self._require_action(actor, ACTION_EDIT)
        form = self._load(actor.business_id, form_id)
        self._require_draft(form)

        filtered = self._filter(actor, form, patch)
        updated = compute_derived(merge_patch(form, filtered.accepted))
        updated = replace(updated, updated_at=self._clock.now_utc())
        saved = self._repository.save(updated, expected_version=expected_version)

        logger.debug("Daily form %s recomputed (version %d)", saved.form_id, saved.version)
        self._audit(
            actor, AUDIT_ACTION_UPDATE, saved, "Updated daily form draft",
            metadata={"dropped": list(filtered.dropped)} if filtered.dropped else None,
        )
        return saved

    # ── submission ────────────────────────────────────────────

    def submit(
        self,
        actor: ActorContext,
        form_id: str,
        final_patch: Optional[Mapping[str, Any]] = None,
        expected_version: Optional[int] = None,
    ) -> DailyForm:
        """
        Freeze a draft after the submission rules pass.

        On a failed rule SubmissionValidationError is raised and the
        stored form is left untouched, final patch included.
        """
        self._require_action(actor, ACTION_SUBMIT)
        form = self._load(actor.business_id, form_id)
        if form.status != FormStatus.DRAFT:
            raise InvalidStateError(
                "Form already submitted/locked",
                details={"form_id": form.form_id, "status": form.status.value},
            )

        filtered = self._filter(actor, form, final_patch, writable=SUBMIT_WRITABLE_FIELDS)
        candidate = compute_derived(merge_patch(form, filtered.accepted))

        rejection = validate_submission(candidate)
        if rejection is not None:
            logger.warning(
                "Daily form %s submission rejected: %s", form.form_id, rejection.message
            )
            raise SubmissionValidationError(rejection)

        submitted = replace(
            candidate,
            status=FormStatus.SUBMITTED,
            approved_by=actor.actor_id,
            updated_at=self._clock.now_utc(),
        )
        saved = self._repository.save(submitted, expected_version=expected_version)

        logger.info("Daily form %s submitted by %s", saved.form_id, actor.actor_id)
        self._audit(actor, AUDIT_ACTION_SUBMIT, saved, "Submitted daily form")
        return saved

    # ── deletion ──────────────────────────────────────────────

    def delete(self, actor: ActorContext, form_id: str) -> None:
        """Hard delete, owner only, any status."""
        self._require_action(actor, ACTION_DELETE)
        form = self._load(actor.business_id, form_id)
        if not self._repository.delete(actor.business_id, form_id):
            raise FormNotFoundError("Daily form not found", details={"form_id": form_id})

        logger.info("Daily form %s deleted by %s", form_id, actor.actor_id)
        self._audit(actor, AUDIT_ACTION_DELETE, form, "Deleted daily form")

    # ── preview ───────────────────────────────────────────────

    def preview(self, document: Mapping[str, Any]) -> DerivedValues:
        """Recompute a client-side document without touching storage."""
        if not isinstance(document, Mapping):
            raise InvalidInputError("form must be an object.")
        return compute_values(
            supplier_entries=tuple(
                SupplierEntry.from_dict(row) for row in _rows(document, "supplierEntries")
            ),
            items=tuple(ItemRow.from_dict(row) for row in _rows(document, "items")),
            expenses=tuple(ExpenseEntry.from_dict(row) for row in _rows(document, "expenses")),
            cash_summary=CashSummary.from_dict(document.get("cashSummary")),
        )


def _rows(document: Mapping[str, Any], name: str) -> list:
    rows = document.get(name)
    if rows is None:
        return []
    if not isinstance(rows, list):
        raise InvalidInputError(f"{name} must be a list.", details={"field": name})
    return rows


def _parse_day(value) -> date:
    try:
        return parse_business_date(value)
    except ValueError as exc:
        raise InvalidInputError(str(exc), details={"field": "date"}) from exc
