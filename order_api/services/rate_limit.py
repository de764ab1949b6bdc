from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from order_api.core.config import settings
from order_api.core.errors import RateLimitError
from order_api.db.models import OrderRateLimit, utcnow

logger = logging.getLogger(__name__)


def check_and_record(
    db: Session,
    user_id: str,
    now: datetime | None = None,
    max_attempts: int | None = None,
    window_seconds: int | None = None,
) -> int:
    """시도 1건을 기록한 뒤 윈도우 안의 시도 횟수를 센다.

    - 기록과 카운트는 원자적이지 않다(best-effort, 동시 요청 시 근사치)
    - 현재 시도를 포함해 max_attempts를 넘으면 RateLimitError
    - 반환값: 윈도우 안의 시도 횟수
    """
    now = now or utcnow()
    limit = max_attempts if max_attempts is not None else settings.RATE_LIMIT_MAX_ATTEMPTS
    window = window_seconds if window_seconds is not None else settings.RATE_LIMIT_WINDOW_SECONDS

    db.add(OrderRateLimit(user_id=user_id, created_at=now))
    db.commit()

    since = now - timedelta(seconds=window)
    count = (
        db.query(func.count(OrderRateLimit.id))
        .filter(OrderRateLimit.user_id == user_id)
        .filter(OrderRateLimit.created_at >= since)
        .scalar()
    ) or 0

    if count > limit:
        logger.warning(f"[rate-limit] user {user_id} exceeded {limit} attempts in {window}s ({count})")
        raise RateLimitError()
    return int(count)
