from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ProbeRecord",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("timestamp", models.DateTimeField(db_index=True)),
                ("up", models.BooleanField()),
                ("response_time_ms", models.PositiveIntegerField()),
                ("error_message", models.TextField(blank=True, null=True)),
                (
                    "status_code",
                    models.PositiveSmallIntegerField(blank=True, null=True),
                ),
                ("consecutive_failures", models.PositiveIntegerField(default=0)),
            ],
            options={
                "verbose_name": "Probe Record",
                "verbose_name_plural": "Probe Records",
                "ordering": ["-timestamp", "-id"],
                "get_latest_by": ["timestamp", "id"],
                "indexes": [
                    models.Index(fields=["-timestamp"], name="probe_timestamp_idx"),
                    models.Index(
                        fields=["up", "timestamp"], name="probe_up_timestamp_idx"
                    ),
                ],
            },
        ),
    ]
