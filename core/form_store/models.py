"""
DUKA Form Store - Relational Models
===================================
One row per catalog product and one row per daily form.

The daily form is stored as a whole JSON document next to the
columns that make up its identity. The unique constraint on
(business_id, date, shift) is the concurrency guard for creation.
"""

from __future__ import annotations

from django.db import models


class ShiftChoice(models.TextChoices):
    MORNING = "Morning", "Morning"
    EVENING = "Evening", "Evening"


class FormStatusChoice(models.TextChoices):
    DRAFT = "draft", "Draft"
    SUBMITTED = "submitted", "Submitted"
    LOCKED = "locked", "Locked"


class ProductRecord(models.Model):
    product_id = models.CharField(primary_key=True, max_length=64)
    business_id = models.UUIDField(db_index=True)
    item_code = models.CharField(max_length=64)
    name = models.CharField(max_length=255)
    unit = models.CharField(max_length=32, default="pcs")
    category = models.CharField(max_length=64, default="general")
    selling_price = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    cost_price = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    reorder_level = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "duka_products"
        ordering = ["business_id", "created_at", "product_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["business_id", "item_code"],
                name="uniq_product_business_item_code",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.item_code} ({self.name})"


class DailyFormRecord(models.Model):
    form_id = models.CharField(primary_key=True, max_length=64)
    business_id = models.UUIDField()
    date = models.DateField()
    shift = models.CharField(max_length=16, choices=ShiftChoice.choices)
    status = models.CharField(
        max_length=16,
        choices=FormStatusChoice.choices,
        default=FormStatusChoice.DRAFT,
    )
    version = models.PositiveIntegerField(default=1)
    document = models.JSONField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "duka_daily_forms"
        ordering = ["-date", "shift", "form_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["business_id", "date", "shift"],
                name="uniq_daily_form_business_date_shift",
            ),
        ]
        indexes = [
            models.Index(fields=["business_id", "date"], name="idx_daily_form_biz_date"),
        ]

    def __str__(self) -> str:
        return f"{self.form_id} ({self.date} {self.shift})"
