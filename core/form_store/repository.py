"""
DUKA Form Store - DB-backed Repository and Catalog
==================================================
Django implementations of DailyFormRepository and ProductCatalog.

Each save is a single-row update inside transaction.atomic(); that
row is the atomicity boundary. Model imports stay inside methods so
the engine can be imported without a configured Django.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from django.db import IntegrityError, transaction
from django.db.models import Case, IntegerField, Q, Value, When

from core.catalog.models import Product
from core.catalog.provider import DuplicateItemCodeError
from engines.daily_forms.errors import FormConflictError, FormNotFoundError
from engines.daily_forms.models import DailyForm, FormKey, FormStatus, Shift
from engines.daily_forms.repository import check_expected_version, check_stored_draft


def _record_to_form(record) -> DailyForm:
    form = DailyForm.from_dict(record.document)
    return replace(form, version=record.version)


class DbDailyFormRepository:
    def add(self, form: DailyForm) -> DailyForm:
        from core.form_store.models import DailyFormRecord

        try:
            with transaction.atomic():
                DailyFormRecord.objects.create(
                    form_id=form.form_id,
                    business_id=form.business_id,
                    date=form.date,
                    shift=form.shift.value,
                    status=form.status.value,
                    version=form.version,
                    document=form.to_dict(),
                )
        except IntegrityError as exc:
            raise FormConflictError(
                "Daily form already exists for this date/shift.",
                details={"date": form.date.isoformat(), "shift": form.shift.value},
            ) from exc
        return form

    def get(self, business_id: uuid.UUID, form_id: str) -> Optional[DailyForm]:
        from core.form_store.models import DailyFormRecord

        record = DailyFormRecord.objects.filter(
            form_id=form_id,
            business_id=business_id,
        ).first()
        return None if record is None else _record_to_form(record)

    def find_by_key(self, key: FormKey) -> Optional[DailyForm]:
        from core.form_store.models import DailyFormRecord

        record = DailyFormRecord.objects.filter(
            business_id=key.business_id,
            date=key.date,
            shift=key.shift.value,
        ).first()
        return None if record is None else _record_to_form(record)

    def save(
        self,
        form: DailyForm,
        expected_version: Optional[int] = None,
        require_draft: bool = True,
    ) -> DailyForm:
        from core.form_store.models import DailyFormRecord

        with transaction.atomic():
            record = (
                DailyFormRecord.objects.select_for_update()
                .filter(form_id=form.form_id, business_id=form.business_id)
                .first()
            )
            if record is None:
                raise FormNotFoundError(
                    "Daily form not found", details={"form_id": form.form_id}
                )
            check_stored_draft(form.form_id, FormStatus(record.status), require_draft)
            check_expected_version(_record_to_form(record), expected_version)

            stored = replace(form, version=record.version + 1)
            record.status = stored.status.value
            record.version = stored.version
            record.document = stored.to_dict()
            record.save(update_fields=["status", "version", "document", "updated_at"])
        return stored

    def delete(self, business_id: uuid.UUID, form_id: str) -> bool:
        from core.form_store.models import DailyFormRecord

        deleted, _ = DailyFormRecord.objects.filter(
            form_id=form_id,
            business_id=business_id,
        ).delete()
        return deleted > 0

    def page_for_business(
        self,
        business_id: uuid.UUID,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[tuple[DailyForm, ...], int]:
        from core.form_store.models import DailyFormRecord

        query = DailyFormRecord.objects.filter(business_id=business_id)
        if start_date is not None:
            query = query.filter(date__gte=start_date)
        if end_date is not None:
            query = query.filter(date__lte=end_date)

        total = query.count()
        rows = query.annotate(
            shift_rank=Case(
                When(shift=Shift.MORNING.value, then=Value(0)),
                default=Value(1),
                output_field=IntegerField(),
            )
        ).order_by("-date", "shift_rank", "form_id")[offset:offset + limit]
        return tuple(_record_to_form(row) for row in rows), total


def _record_to_product(row) -> Product:
    return Product(
        product_id=row.product_id,
        business_id=row.business_id,
        item_code=row.item_code,
        name=row.name,
        unit=row.unit,
        category=row.category,
        selling_price=Decimal(row.selling_price),
        cost_price=Decimal(row.cost_price),
        reorder_level=Decimal(row.reorder_level),
        is_active=row.is_active,
    )


class DbProductCatalog:
    def active_products(
        self,
        business_id: uuid.UUID,
        product_ids: Optional[Iterable[str]] = None,
    ) -> tuple[Product, ...]:
        from core.form_store.models import ProductRecord

        query = ProductRecord.objects.filter(business_id=business_id, is_active=True)
        if product_ids:
            query = query.filter(product_id__in=[str(pid) for pid in product_ids])
        return tuple(
            _record_to_product(row) for row in query.order_by("created_at", "product_id")
        )

    def list_products(
        self,
        business_id: uuid.UUID,
        *,
        active: Optional[bool] = True,
        search: str = "",
    ) -> tuple[Product, ...]:
        from core.form_store.models import ProductRecord

        query = ProductRecord.objects.filter(business_id=business_id)
        if active is not None:
            query = query.filter(is_active=active)
        search = search.strip()
        if search:
            query = query.filter(Q(item_code__icontains=search) | Q(name__icontains=search))
        return tuple(
            _record_to_product(row) for row in query.order_by("-created_at", "-product_id")
        )

    def get_product(self, business_id: uuid.UUID, product_id: str) -> Optional[Product]:
        from core.form_store.models import ProductRecord

        row = ProductRecord.objects.filter(
            business_id=business_id,
            product_id=product_id,
        ).first()
        return None if row is None else _record_to_product(row)

    def add(self, product: Product) -> Product:
        from core.form_store.models import ProductRecord

        try:
            with transaction.atomic():
                ProductRecord.objects.create(
                    product_id=product.product_id,
                    business_id=product.business_id,
                    item_code=product.item_code,
                    name=product.name,
                    unit=product.unit,
                    category=product.category,
                    selling_price=product.selling_price,
                    cost_price=product.cost_price,
                    reorder_level=product.reorder_level,
                    is_active=product.is_active,
                )
        except IntegrityError as exc:
            raise DuplicateItemCodeError(product) from exc
        return product

    def save(self, product: Product) -> Product:
        from core.form_store.models import ProductRecord

        try:
            with transaction.atomic():
                row = (
                    ProductRecord.objects.select_for_update()
                    .filter(product_id=product.product_id, business_id=product.business_id)
                    .first()
                )
                if row is None:
                    raise LookupError(f"Product '{product.product_id}' not found.")
                row.item_code = product.item_code
                row.name = product.name
                row.unit = product.unit
                row.category = product.category
                row.selling_price = product.selling_price
                row.cost_price = product.cost_price
                row.reorder_level = product.reorder_level
                row.is_active = product.is_active
                row.save()
        except IntegrityError as exc:
            raise DuplicateItemCodeError(product) from exc
        return product
