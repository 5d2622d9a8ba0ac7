from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("registrations", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="registration",
            name="certificate_requested",
            field=models.BooleanField(default=False),
        ),
        migrations.AddField(
            model_name="registration",
            name="payment_status",
            field=models.CharField(
                choices=[
                    ("unpaid", "Unpaid"),
                    ("pending", "Pending"),
                    ("paid", "Paid"),
                    ("waived", "Waived"),
                ],
                default="unpaid",
                max_length=20,
            ),
        ),
        migrations.AddField(
            model_name="registration",
            name="agreed_at",
            field=models.DateTimeField(blank=True, null=True),
        ),
    ]
