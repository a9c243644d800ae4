"""
Rewardify Vendor Store - App Configuration
==========================================
Vendor-owned dashboard records: customers, transactions, rewards,
invoices, gift cards, promotions.
"""

from django.apps import AppConfig


class CoreVendorStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.vendor_store"
    label = "core_vendor_store"
    verbose_name = "Rewardify Vendor Store"
