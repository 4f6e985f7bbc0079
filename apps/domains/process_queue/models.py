# apps/domains/process_queue/models.py
from django.db import models
from apps.api.common.models import BaseModel


class WorkItemModel(BaseModel):
    """
    Process queue 1건 (subject x category).

    - 완료된 WorkItem은 삭제되므로 남아 있는 row는 전부 미완료
    - 따라서 (subject_id, category) unique = "미완료 중복 금지"를 DB 레벨에서 보장
    """
    category = models.CharField(max_length=50)
    # 외부 엔티티 id (FK 아님, queue는 subject를 소유하지 않음)
    subject_id = models.BigIntegerField()
    attempts = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "process_queue"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["category", "created_at"], name="idx_pq_category_created"),
            models.Index(fields=["created_at"], name="idx_pq_created"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["subject_id", "category"],
                name="uniq_pq_subject_category",
            ),
        ]

    def __str__(self):
        return f"{self.category}#{self.subject_id}"


class CompletionTrackerModel(BaseModel):
    """
    WorkItem x consumer 진행 상태.
    WorkItem 삭제 시 cascade.
    """

    class Status(models.TextChoices):
        PENDING = "pending", "pending"
        ACTIVE = "active", "active"
        COMPLETED = "completed", "completed"
        FAILED = "failed", "failed"

    work_item = models.ForeignKey(
        WorkItemModel,
        on_delete=models.CASCADE,
        related_name="trackers",
    )
    consumer_name = models.CharField(max_length=100)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    error_message = models.TextField(blank=True, default="")
    attempts = models.PositiveIntegerField(default=0)
    completed_at = models.DateTimeField(null=True, blank=True)
    failed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "process_queue_processor"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["work_item", "status"], name="idx_pqp_queue_status"),
            models.Index(fields=["status", "updated_at"], name="idx_pqp_status_updated"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["work_item", "consumer_name"],
                name="uniq_pqp_queue_processor",
            ),
        ]

    def __str__(self):
        return f"{self.work_item_id}:{self.consumer_name}={self.status}"
