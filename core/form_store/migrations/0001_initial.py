from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ProductRecord",
            fields=[
                ("product_id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("business_id", models.UUIDField(db_index=True)),
                ("item_code", models.CharField(max_length=64)),
                ("name", models.CharField(max_length=255)),
                ("unit", models.CharField(default="pcs", max_length=32)),
                ("category", models.CharField(default="general", max_length=64)),
                ("selling_price", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "duka_products",
                "ordering": ["business_id", "created_at", "product_id"],
            },
        ),
        migrations.CreateModel(
            name="DailyFormRecord",
            fields=[
                ("form_id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("business_id", models.UUIDField()),
                ("date", models.DateField()),
                (
                    "shift",
                    models.CharField(
                        choices=[("Morning", "Morning"), ("Evening", "Evening")],
                        max_length=16,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("submitted", "Submitted"),
                            ("locked", "Locked"),
                        ],
                        default="draft",
                        max_length=16,
                    ),
                ),
                ("version", models.PositiveIntegerField(default=1)),
                ("document", models.JSONField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "duka_daily_forms",
                "ordering": ["-date", "shift", "form_id"],
            },
        ),
        migrations.AddConstraint(
            model_name="productrecord",
            constraint=models.UniqueConstraint(
                fields=("business_id", "item_code"),
                name="uniq_product_business_item_code",
            ),
        ),
        migrations.AddConstraint(
            model_name="dailyformrecord",
            constraint=models.UniqueConstraint(
                fields=("business_id", "date", "shift"),
                name="uniq_daily_form_business_date_shift",
            ),
        ),
        migrations.AddIndex(
            model_name="dailyformrecord",
            index=models.Index(fields=["business_id", "date"], name="idx_daily_form_biz_date"),
        ),
    ]
