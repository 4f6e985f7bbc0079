# PATH: inventory/adapters/notify/webhook.py
#
# PURPOSE:
# - process queue consumer 실패를 운영 채널(Discord 호환 webhook)로 알림
# - 알림 실패는 로그만 남기고 queue 처리에는 영향 없음
#
# DESIGN:
# - timeout 명시
# - retry 없음 (다음 실패 시 다시 알림)

from __future__ import annotations

import logging
from typing import Optional

import requests

from inventory.domain.process_queue.entities import CompletionTracker, WorkItem

logger = logging.getLogger("inventory.notify.webhook")

# Discord content 최대 2000자
MAX_CONTENT_LENGTH = 2000


def format_failure_message(item: WorkItem, tracker: CompletionTracker, error_message: str) -> str:
    message = (
        "**Queue Processor Failed** :warning:\n\n"
        f"**Type:** {item.category}\n"
        f"**Processor:** {tracker.consumer_name}\n"
        f"**Subject ID:** {item.subject_id}\n"
        f"**Error:** {error_message}\n"
        f"**Queue Attempts:** {item.attempts}"
    )
    return message[:MAX_CONTENT_LENGTH]


class WebhookFailureNotifier:
    """FailureNotifier 구현 (requests POST)."""

    def __init__(self, url: str, timeout_seconds: float = 5.0, session: Optional[requests.Session] = None) -> None:
        if not url:
            raise ValueError("url is required")
        self._url = url
        self._timeout = float(timeout_seconds)
        self._session = session or requests.Session()

    def notify(self, item: WorkItem, tracker: CompletionTracker, error_message: str) -> None:
        try:
            resp = self._session.post(
                self._url,
                json={"content": format_failure_message(item, tracker, error_message)},
                timeout=self._timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            # 알림 실패로 queue 처리가 멈추면 안 됨
            logger.error("Failed to send failure notification | queue_id=%s | error=%s", item.id, e)

    def close(self) -> None:
        self._session.close()


def get_failure_notifier(url: Optional[str]) -> Optional[WebhookFailureNotifier]:
    """url 미설정이면 None (알림 비활성)."""
    if not url:
        return None
    return WebhookFailureNotifier(url)
