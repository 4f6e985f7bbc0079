from .base import *

DEBUG = True

# 로컬 개발: DB_NAME 미설정이면 sqlite 파일 사용
if not os.getenv("DB_NAME"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

LOGGING["loggers"]["inventory"]["level"] = os.getenv("INVENTORY_LOG_LEVEL", "DEBUG")
