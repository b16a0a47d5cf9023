from django.db import migrations, models


class Migration(migrations.Migration):
    dependencies = [
        ("core_form_store", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="productrecord",
            name="cost_price",
            field=models.DecimalField(decimal_places=2, default=0, max_digits=14),
        ),
        migrations.AddField(
            model_name="productrecord",
            name="reorder_level",
            field=models.DecimalField(decimal_places=2, default=0, max_digits=14),
        ),
    ]
