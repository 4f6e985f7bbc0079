import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="WorkItemModel",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("category", models.CharField(max_length=50)),
                ("subject_id", models.BigIntegerField()),
                ("attempts", models.PositiveIntegerField(default=0)),
            ],
            options={
                "db_table": "process_queue",
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="CompletionTrackerModel",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("consumer_name", models.CharField(max_length=100)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "pending"),
                            ("active", "active"),
                            ("completed", "completed"),
                            ("failed", "failed"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("error_message", models.TextField(blank=True, default="")),
                ("attempts", models.PositiveIntegerField(default=0)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("failed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "work_item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="trackers",
                        to="process_queue.workitemmodel",
                    ),
                ),
            ],
            options={
                "db_table": "process_queue_processor",
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.AddIndex(
            model_name="workitemmodel",
            index=models.Index(fields=["category", "created_at"], name="idx_pq_category_created"),
        ),
        migrations.AddIndex(
            model_name="workitemmodel",
            index=models.Index(fields=["created_at"], name="idx_pq_created"),
        ),
        migrations.AddConstraint(
            model_name="workitemmodel",
            constraint=models.UniqueConstraint(fields=("subject_id", "category"), name="uniq_pq_subject_category"),
        ),
        migrations.AddIndex(
            model_name="completiontrackermodel",
            index=models.Index(fields=["work_item", "status"], name="idx_pqp_queue_status"),
        ),
        migrations.AddIndex(
            model_name="completiontrackermodel",
            index=models.Index(fields=["status", "updated_at"], name="idx_pqp_status_updated"),
        ),
        migrations.AddConstraint(
            model_name="completiontrackermodel",
            constraint=models.UniqueConstraint(fields=("work_item", "consumer_name"), name="uniq_pqp_queue_processor"),
        ),
    ]
