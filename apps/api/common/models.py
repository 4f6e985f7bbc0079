# PATH: apps/api/common/models.py
from django.db import models


class TimestampModel(models.Model):
    """
    생성 / 수정 시간 자동 기록 추상 모델

    - created_at: queue FIFO 정렬 기준 (불변)
    - updated_at: 마지막 상태 전이 시각 (.update() 사용 시 직접 지정)
    """
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class BaseModel(TimestampModel):
    """
    모든 모델이 상속하는 공통 베이스 모델.
    """
    class Meta:
        abstract = True
