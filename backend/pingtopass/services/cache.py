import logging
from typing import Optional

import redis

from pingtopass.core.config import settings
from pingtopass.schemas.dashboard import DashboardStats

logger = logging.getLogger(__name__)


class DashboardCache:
    """
    Per-user dashboard stats cached in Redis.

    Without a Redis client every lookup misses and writes are skipped.
    Redis failures are logged and treated as misses so the dashboard is
    still served from the database.
    """

    def __init__(self, client: Optional[redis.Redis] = None, ttl: int = settings.DASHBOARD_CACHE_TTL):
        self.client = client
        self.ttl = ttl

    @property
    def enabled(self) -> bool:
        return self.client is not None

    @staticmethod
    def key(user_id: int) -> str:
        return f"pingtopass:dashboard:{user_id}"

    def get(self, user_id: int) -> Optional[DashboardStats]:
        if not self.enabled:
            return None
        try:
            raw = self.client.get(self.key(user_id))
        except redis.RedisError as e:
            logger.warning("Dashboard cache read failed for user %s: %s", user_id, e)
            return None
        if raw is None:
            return None
        return DashboardStats.model_validate_json(raw)

    def set(self, user_id: int, stats: DashboardStats) -> None:
        if not self.enabled:
            return
        try:
            self.client.setex(self.key(user_id), self.ttl, stats.model_dump_json())
        except redis.RedisError as e:
            logger.warning("Dashboard cache write failed for user %s: %s", user_id, e)

    def invalidate(self, user_id: int) -> None:
        if not self.enabled:
            return
        try:
            self.client.delete(self.key(user_id))
        except redis.RedisError as e:
            logger.warning("Dashboard cache invalidation failed for user %s: %s", user_id, e)
