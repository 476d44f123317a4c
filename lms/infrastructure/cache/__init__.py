# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Cache infrastructure using Redis.

Redis holds one refresh token per principal; nothing else is cached.

Example:
    from lms.infrastructure.cache import init_redis, get_redis

    # Initialize at application startup
    await init_redis(settings)

    redis = get_redis()
    await redis.set("refresh_token:abc", token, expire_seconds=604800)

    # Cleanup at shutdown
    await close_redis()
"""

from lms.infrastructure.cache.redis_client import (
    RedisClient,
    RedisError,
    close_redis,
    get_redis,
    init_redis,
)

__all__ = [
    "RedisClient",
    "RedisError",
    "close_redis",
    "get_redis",
    "init_redis",
]
