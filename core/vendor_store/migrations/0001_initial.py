import uuid

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Vendor",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(blank=True, default="", max_length=255)),
                ("email", models.EmailField(max_length=254, unique=True)),
                ("phone", models.CharField(blank=True, max_length=32, null=True)),
                ("company_name", models.CharField(blank=True, default="", max_length=255)),
                ("company_address", models.JSONField(blank=True, null=True)),
                ("tax_number", models.CharField(blank=True, max_length=64, null=True)),
                (
                    "tax_type",
                    models.CharField(
                        blank=True,
                        choices=[("GST", "GST"), ("VAT", "VAT"), ("OTHER", "Other")],
                        max_length=16,
                        null=True,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "rewardify_vendors",
                "ordering": ["email"],
            },
        ),
        migrations.CreateModel(
            name="Customer",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("phone", models.CharField(max_length=32)),
                ("name", models.CharField(blank=True, max_length=255, null=True)),
                ("email", models.EmailField(blank=True, max_length=254, null=True)),
                (
                    "gender",
                    models.CharField(
                        choices=[
                            ("MALE", "Male"),
                            ("FEMALE", "Female"),
                            ("OTHER", "Other"),
                            ("NA", "Not specified"),
                        ],
                        default="NA",
                        max_length=8,
                    ),
                ),
                ("tax_number", models.CharField(blank=True, max_length=64, null=True)),
                ("rewards", models.JSONField(blank=True, default=dict)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "vendor",
                    models.ForeignKey(
                        db_column="vendor_id",
                        on_delete=models.deletion.CASCADE,
                        related_name="customers",
                        to="core_vendor_store.vendor",
                    ),
                ),
            ],
            options={
                "db_table": "rewardify_customers",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["vendor", "phone"], name="idx_customer_vendor_phone"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("vendor", "phone"), name="uq_customer_vendor_phone"),
                ],
            },
        ),
        migrations.CreateModel(
            name="RewardPolicy",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=100)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("PERCENTAGE_DISCOUNT", "Percentage discount"),
                            ("FIXED_DISCOUNT", "Fixed discount"),
                            ("FLAT_DISCOUNT", "Flat discount"),
                            ("PERCENTAGE_CREDIT", "Percentage credit"),
                            ("FIXED_CREDIT", "Fixed credit"),
                            ("POINT_BASED", "Point based"),
                            ("CUSTOM", "Custom"),
                            ("NONE", "None"),
                        ],
                        max_length=32,
                    ),
                ),
                ("config", models.JSONField(blank=True, default=dict)),
                ("expiry", models.PositiveIntegerField(blank=True, null=True)),
                ("expires_at", models.DateTimeField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "vendor",
                    models.OneToOneField(
                        db_column="vendor_id",
                        on_delete=models.deletion.CASCADE,
                        related_name="reward_policy",
                        to="core_vendor_store.vendor",
                    ),
                ),
            ],
            options={
                "db_table": "rewardify_reward_policies",
            },
        ),
        migrations.CreateModel(
            name="Transaction",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("phone", models.CharField(max_length=32)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("CASH", "Cash"),
                            ("UPI", "UPI"),
                            ("CREDIT", "Credit card"),
                            ("DEBIT", "Debit card"),
                            ("OTHER", "Other"),
                        ],
                        max_length=16,
                    ),
                ),
                ("amount", models.FloatField()),
                ("discount_percentage", models.FloatField(default=0)),
                ("description", models.TextField(blank=True, null=True)),
                ("category", models.CharField(blank=True, max_length=100, null=True)),
                ("reward", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "customer",
                    models.ForeignKey(
                        blank=True,
                        db_column="customer_id",
                        null=True,
                        on_delete=models.deletion.SET_NULL,
                        related_name="transactions",
                        to="core_vendor_store.customer",
                    ),
                ),
                (
                    "vendor",
                    models.ForeignKey(
                        db_column="vendor_id",
                        on_delete=models.deletion.CASCADE,
                        related_name="transactions",
                        to="core_vendor_store.vendor",
                    ),
                ),
            ],
            options={
                "db_table": "rewardify_transactions",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["vendor", "created_at"], name="idx_tx_vendor_created"),
                ],
            },
        ),
        migrations.CreateModel(
            name="TransactionItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("quantity", models.PositiveIntegerField()),
                ("price", models.FloatField()),
                ("tax_rate", models.FloatField(default=0)),
                ("total_amount", models.FloatField()),
                ("category", models.CharField(blank=True, max_length=100, null=True)),
                ("position", models.PositiveIntegerField(default=0)),
                (
                    "transaction",
                    models.ForeignKey(
                        db_column="transaction_id",
                        on_delete=models.deletion.CASCADE,
                        related_name="items",
                        to="core_vendor_store.transaction",
                    ),
                ),
            ],
            options={
                "db_table": "rewardify_transaction_items",
                "ordering": ["transaction_id", "position"],
            },
        ),
        migrations.CreateModel(
            name="TransactionAudit",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("transaction_id", models.UUIDField(db_index=True)),
                ("original_values", models.JSONField()),
                ("timestamp", models.DateTimeField()),
                (
                    "vendor",
                    models.ForeignKey(
                        db_column="vendor_id",
                        on_delete=models.deletion.CASCADE,
                        related_name="transaction_audits",
                        to="core_vendor_store.vendor",
                    ),
                ),
            ],
            options={
                "db_table": "rewardify_transaction_audits",
                "ordering": ["timestamp"],
            },
        ),
        migrations.CreateModel(
            name="InvoiceGeneration",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("reference_number", models.CharField(db_index=True, max_length=64)),
                ("generated_by", models.CharField(blank=True, max_length=64, null=True)),
                ("metadata", models.JSONField(blank=True, null=True)),
                ("generated_at", models.DateTimeField()),
                (
                    "transaction",
                    models.ForeignKey(
                        db_column="transaction_id",
                        on_delete=models.deletion.CASCADE,
                        related_name="invoice_generations",
                        to="core_vendor_store.transaction",
                    ),
                ),
            ],
            options={
                "db_table": "rewardify_invoice_generations",
                "ordering": ["generated_at"],
            },
        ),
        migrations.CreateModel(
            name="GiftCard",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("code", models.CharField(max_length=32, unique=True)),
                ("amount", models.FloatField()),
                ("description", models.TextField(blank=True, default="")),
                ("terms", models.TextField(blank=True, null=True)),
                ("validity_days", models.PositiveIntegerField()),
                ("expiration_date", models.DateTimeField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "vendor",
                    models.ForeignKey(
                        db_column="vendor_id",
                        on_delete=models.deletion.CASCADE,
                        related_name="gift_cards",
                        to="core_vendor_store.vendor",
                    ),
                ),
            ],
            options={
                "db_table": "rewardify_gift_cards",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Promotion",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, null=True)),
                ("category", models.CharField(max_length=100)),
                ("original_price", models.FloatField()),
                ("updated_price", models.FloatField()),
                ("discount_percent", models.FloatField()),
                ("images", models.JSONField(blank=True, default=list)),
                ("start_date", models.DateTimeField(blank=True, null=True)),
                ("end_date", models.DateTimeField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("max_redemptions", models.PositiveIntegerField(blank=True, null=True)),
                ("current_redemptions", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "vendor",
                    models.ForeignKey(
                        db_column="vendor_id",
                        on_delete=models.deletion.CASCADE,
                        related_name="promotions",
                        to="core_vendor_store.vendor",
                    ),
                ),
            ],
            options={
                "db_table": "rewardify_promotions",
                "ordering": ["-created_at"],
            },
        ),
    ]
