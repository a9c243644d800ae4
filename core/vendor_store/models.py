"""
Rewardify Vendor Store - Relational Dashboard State
===================================================
DB-backed records owned by a vendor: customers, transactions with their
line items and audit trail, reward policy, invoices, gift cards and
promotions.

Customer.rewards holds the per-vendor reward ledger as JSON
(vendor id → list of entries); see engines/rewards/ledger.py.
"""

from __future__ import annotations

import uuid

from django.db import models


class Gender(models.TextChoices):
    MALE = "MALE", "Male"
    FEMALE = "FEMALE", "Female"
    OTHER = "OTHER", "Other"
    NA = "NA", "Not specified"


class TransactionType(models.TextChoices):
    CASH = "CASH", "Cash"
    UPI = "UPI", "UPI"
    CREDIT = "CREDIT", "Credit card"
    DEBIT = "DEBIT", "Debit card"
    OTHER = "OTHER", "Other"


class RewardPolicyType(models.TextChoices):
    PERCENTAGE_DISCOUNT = "PERCENTAGE_DISCOUNT", "Percentage discount"
    FIXED_DISCOUNT = "FIXED_DISCOUNT", "Fixed discount"
    FLAT_DISCOUNT = "FLAT_DISCOUNT", "Flat discount"
    PERCENTAGE_CREDIT = "PERCENTAGE_CREDIT", "Percentage credit"
    FIXED_CREDIT = "FIXED_CREDIT", "Fixed credit"
    POINT_BASED = "POINT_BASED", "Point based"
    CUSTOM = "CUSTOM", "Custom"
    NONE = "NONE", "None"


class TaxType(models.TextChoices):
    GST = "GST", "GST"
    VAT = "VAT", "VAT"
    OTHER = "OTHER", "Other"


class Vendor(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255, default="", blank=True)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=32, null=True, blank=True)
    company_name = models.CharField(max_length=255, default="", blank=True)
    company_address = models.JSONField(null=True, blank=True)
    tax_number = models.CharField(max_length=64, null=True, blank=True)
    tax_type = models.CharField(max_length=16, choices=TaxType.choices, null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "rewardify_vendors"
        ordering = ["email"]

    def __str__(self) -> str:
        return f"{self.id} ({self.email})"


class Customer(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    vendor = models.ForeignKey(
        Vendor,
        on_delete=models.CASCADE,
        related_name="customers",
        db_column="vendor_id",
    )
    phone = models.CharField(max_length=32)
    name = models.CharField(max_length=255, null=True, blank=True)
    email = models.EmailField(null=True, blank=True)
    gender = models.CharField(max_length=8, choices=Gender.choices, default=Gender.NA)
    tax_number = models.CharField(max_length=64, null=True, blank=True)
    rewards = models.JSONField(default=dict, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "rewardify_customers"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["vendor", "phone"], name="idx_customer_vendor_phone"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["vendor", "phone"],
                name="uq_customer_vendor_phone",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.phone} ({self.vendor_id})"


class RewardPolicy(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    vendor = models.OneToOneField(
        Vendor,
        on_delete=models.CASCADE,
        related_name="reward_policy",
        db_column="vendor_id",
    )
    name = models.CharField(max_length=100)
    type = models.CharField(max_length=32, choices=RewardPolicyType.choices)
    config = models.JSONField(default=dict, blank=True)
    expiry = models.PositiveIntegerField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "rewardify_reward_policies"

    def __str__(self) -> str:
        return f"{self.name} ({self.vendor_id})"


class Transaction(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    vendor = models.ForeignKey(
        Vendor,
        on_delete=models.CASCADE,
        related_name="transactions",
        db_column="vendor_id",
    )
    customer = models.ForeignKey(
        Customer,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transactions",
        db_column="customer_id",
    )
    phone = models.CharField(max_length=32)
    type = models.CharField(max_length=16, choices=TransactionType.choices)
    amount = models.FloatField()
    discount_percentage = models.FloatField(default=0)
    description = models.TextField(null=True, blank=True)
    category = models.CharField(max_length=100, null=True, blank=True)
    reward = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "rewardify_transactions"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["vendor", "created_at"], name="idx_tx_vendor_created"),
        ]

    def __str__(self) -> str:
        return f"{self.id} ({self.type} {self.amount})"


class TransactionItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    transaction = models.ForeignKey(
        Transaction,
        on_delete=models.CASCADE,
        related_name="items",
        db_column="transaction_id",
    )
    name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField()
    price = models.FloatField()
    tax_rate = models.FloatField(default=0)
    total_amount = models.FloatField()
    category = models.CharField(max_length=100, null=True, blank=True)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "rewardify_transaction_items"
        ordering = ["transaction_id", "position"]

    def __str__(self) -> str:
        return f"{self.name} x{self.quantity}"


class TransactionAudit(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    # Audits outlive the transaction they describe.
    transaction_id = models.UUIDField(db_index=True)
    vendor = models.ForeignKey(
        Vendor,
        on_delete=models.CASCADE,
        related_name="transaction_audits",
        db_column="vendor_id",
    )
    original_values = models.JSONField()
    timestamp = models.DateTimeField()

    class Meta:
        db_table = "rewardify_transaction_audits"
        ordering = ["timestamp"]


class InvoiceGeneration(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    transaction = models.ForeignKey(
        Transaction,
        on_delete=models.CASCADE,
        related_name="invoice_generations",
        db_column="transaction_id",
    )
    reference_number = models.CharField(max_length=64, db_index=True)
    generated_by = models.CharField(max_length=64, null=True, blank=True)
    metadata = models.JSONField(null=True, blank=True)
    generated_at = models.DateTimeField()

    class Meta:
        db_table = "rewardify_invoice_generations"
        ordering = ["generated_at"]


class GiftCard(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    vendor = models.ForeignKey(
        Vendor,
        on_delete=models.CASCADE,
        related_name="gift_cards",
        db_column="vendor_id",
    )
    code = models.CharField(max_length=32, unique=True)
    amount = models.FloatField()
    description = models.TextField(default="", blank=True)
    terms = models.TextField(null=True, blank=True)
    validity_days = models.PositiveIntegerField()
    expiration_date = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "rewardify_gift_cards"
        ordering = ["-created_at"]


class Promotion(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    vendor = models.ForeignKey(
        Vendor,
        on_delete=models.CASCADE,
        related_name="promotions",
        db_column="vendor_id",
    )
    name = models.CharField(max_length=255)
    description = models.TextField(null=True, blank=True)
    category = models.CharField(max_length=100)
    original_price = models.FloatField()
    updated_price = models.FloatField()
    discount_percent = models.FloatField()
    images = models.JSONField(default=list, blank=True)
    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    max_redemptions = models.PositiveIntegerField(null=True, blank=True)
    current_redemptions = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "rewardify_promotions"
        ordering = ["-created_at"]
