from typing import Optional

import redis

from pingtopass.core.config import settings
from pingtopass.services.cache import DashboardCache
from pingtopass.services.question_generator import QuestionGenerator

_redis_client_instance: Optional[redis.Redis] = None
_dashboard_cache_instance: Optional[DashboardCache] = None
_question_generator_instance: Optional[QuestionGenerator] = None


def get_redis_client() -> Optional[redis.Redis]:
    """
    Shared Redis client, or None when ``REDIS_URL`` is not configured.
    """
    global _redis_client_instance
    if _redis_client_instance is None and settings.REDIS_URL:
        _redis_client_instance = redis.from_url(settings.REDIS_URL, decode_responses=True)
    return _redis_client_instance


def get_dashboard_cache() -> DashboardCache:
    global _dashboard_cache_instance
    if _dashboard_cache_instance is None:
        _dashboard_cache_instance = DashboardCache(client=get_redis_client())
    return _dashboard_cache_instance


def get_question_generator() -> QuestionGenerator:
    global _question_generator_instance
    if _question_generator_instance is None:
        _question_generator_instance = QuestionGenerator()
    return _question_generator_instance
