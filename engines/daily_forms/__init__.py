"""
DUKA Daily Form Engine
=========================
Daily stock / sales / cash form: creation from the product catalog,
role-scoped draft editing, derived totals, validated submission
and maintenance of the product catalog.
"""

from engines.daily_forms.calculator import compute_derived, compute_values
from engines.daily_forms.config import STORE_DB, STORE_MEMORY, DailyFormEngineConfig
from engines.daily_forms.errors import (
    DailyFormError,
    ForbiddenError,
    FormConflictError,
    FormNotFoundError,
    InvalidInputError,
    InvalidStateError,
    ProductConflictError,
    ProductNotFoundError,
    SubmissionValidationError,
)
from engines.daily_forms.models import (
    CashSummary,
    DailyForm,
    ExpenseEntry,
    FormKey,
    FormStatus,
    ItemRow,
    PaymentMethod,
    Shift,
    SupplierEntry,
)
from engines.daily_forms.policy import filter_patch, merge_patch
from engines.daily_forms.products import ProductService
from engines.daily_forms.repository import (
    DailyFormRepository,
    FormPage,
    InMemoryDailyFormRepository,
)
from engines.daily_forms.service import DailyFormService
from engines.daily_forms.validator import validate_submission

__all__ = [
    "STORE_DB",
    "STORE_MEMORY",
    "CashSummary",
    "DailyForm",
    "DailyFormEngineConfig",
    "DailyFormError",
    "DailyFormRepository",
    "DailyFormService",
    "ExpenseEntry",
    "ForbiddenError",
    "FormConflictError",
    "FormKey",
    "FormNotFoundError",
    "FormPage",
    "FormStatus",
    "InMemoryDailyFormRepository",
    "InvalidInputError",
    "InvalidStateError",
    "ItemRow",
    "PaymentMethod",
    "ProductConflictError",
    "ProductNotFoundError",
    "ProductService",
    "Shift",
    "SubmissionValidationError",
    "SupplierEntry",
    "compute_derived",
    "compute_values",
    "filter_patch",
    "merge_patch",
    "validate_submission",
]
