# apps/api/config/settings/worker.py

from .base import *
import os

# ==================================================
# Queue runner (cron) 전용
# ==================================================
# 워커는 URLConf 불필요

ROOT_URLCONF = None

# runner는 짧게 실행되고 종료됨 → 연결 재사용 없음
DATABASES["default"]["CONN_MAX_AGE"] = 0

PROCESS_QUEUE_BATCH_LIMIT = int(os.environ.get("PROCESS_QUEUE_BATCH_LIMIT", "1000"))
