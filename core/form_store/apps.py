"""
DUKA Form Store - App Configuration
===================================
Persistent product catalog and daily form documents.
"""

from django.apps import AppConfig


class CoreFormStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.form_store"
    label = "core_form_store"
    verbose_name = "DUKA Form Store"
