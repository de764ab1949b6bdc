from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from order_api.core.config import settings
from order_api.core.errors import CatalogUnavailableError
from order_api.db.models import Item, ItemAddon, Restaurant

logger = logging.getLogger(__name__)


class CatalogReader:
    """주문 가격 계산에 필요한 카탈로그 조회(읽기 전용)."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_items(self, item_ids: Iterable[str]) -> dict[str, Item]:
        ids = sorted(set(item_ids))
        if not ids:
            return {}
        try:
            rows = self.db.query(Item).filter(Item.id.in_(ids)).all()
        except SQLAlchemyError as e:
            logger.exception("[catalog] items query failed")
            raise CatalogUnavailableError("Failed to fetch items") from e
        return {r.id: r for r in rows}

    def get_addons(self, addon_ids: Iterable[str]) -> dict[str, ItemAddon]:
        """사용 가능한 addon만 반환. 없는 id는 결과에서 빠진다."""
        ids = sorted(set(addon_ids))
        if not ids:
            return {}
        try:
            rows = (
                self.db.query(ItemAddon)
                .filter(ItemAddon.id.in_(ids))
                .filter(ItemAddon.is_available.is_(True))
                .all()
            )
        except SQLAlchemyError as e:
            logger.exception("[catalog] addons query failed")
            raise CatalogUnavailableError("Failed to fetch addons") from e
        return {r.id: r for r in rows}

    def get_restaurant(self) -> Restaurant:
        try:
            q = self.db.query(Restaurant)
            if settings.RESTAURANT_ID:
                q = q.filter(Restaurant.id == settings.RESTAURANT_ID)
            restaurant = q.order_by(Restaurant.created_at.asc()).first()
        except SQLAlchemyError as e:
            logger.exception("[catalog] restaurant query failed")
            raise CatalogUnavailableError() from e
        if restaurant is None:
            raise CatalogUnavailableError()
        return restaurant

    def list_available_items(self) -> list[Item]:
        return (
            self.db.query(Item)
            .filter(Item.is_available.is_(True))
            .order_by(Item.name.asc())
            .all()
        )
