# PATH: apps/api/config/settings/prod.py
from .base import *
import os

# ==================================================
# PROD MODE
# ==================================================

DEBUG = False

SECRET_KEY = os.environ["DJANGO_SECRET_KEY"]

# ==================================================
# DATABASE (운영은 반드시 PostgreSQL)
# ==================================================

for _name in ("DB_NAME", "DB_USER", "DB_HOST"):
    if not os.getenv(_name):
        raise RuntimeError(f"{_name} must be set in prod.")

DATABASES["default"]["CONN_MAX_AGE"] = int(os.getenv("DB_CONN_MAX_AGE", "60"))

# ==================================================
# PROCESS QUEUE (운영 기준)
# ==================================================
# 여러 호스트에서 cron이 돌 수 있으면 REDIS_URL/REDIS_HOST 필수 (파일 락은 single host 전용)

# ==================================================
# FINAL ASSERTIONS (운영 안정성)
# ==================================================

assert DEBUG is False, "prod.py must run with DEBUG=False"
