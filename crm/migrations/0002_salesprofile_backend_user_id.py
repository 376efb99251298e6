from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("crm", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="salesprofile",
            name="backend_user_id",
            field=models.CharField(blank=True, max_length=64, null=True),
        ),
    ]
