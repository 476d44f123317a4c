# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Refresh-token session registry.

Exactly one refresh token per principal is valid at a time. It lives in
Redis under refresh_token:{principal_id} with a TTL equal to the refresh
token lifetime. Login overwrites it, refresh rotates it atomically and
logout-all deletes it.

Only AuthService writes to the registry.

Example:
    >>> registry = SessionRegistry(get_redis(), ttl_seconds=604800)
    >>> await registry.store(student.id, tokens.refresh_token)
    >>> await registry.rotate(student.id, old_token, new_token)
    True
"""

import logging

from lms.infrastructure.cache.redis_client import RedisClient

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Maps principal IDs to their single valid refresh token."""

    KEY_PREFIX = "refresh_token"

    def __init__(self, redis: RedisClient, ttl_seconds: int) -> None:
        """Initialize the registry.

        Args:
            redis: Connected Redis client.
            ttl_seconds: Lifetime of a stored entry.
        """
        self._redis = redis
        self._ttl_seconds = ttl_seconds

    def _key(self, principal_id: str) -> str:
        return f"{self.KEY_PREFIX}:{principal_id}"

    async def store(self, principal_id: str, refresh_token: str) -> None:
        """Register a refresh token, replacing any previous one."""
        await self._redis.set(
            self._key(principal_id),
            refresh_token,
            expire_seconds=self._ttl_seconds,
        )

    async def get(self, principal_id: str) -> str | None:
        """Return the currently valid refresh token, if any."""
        return await self._redis.get(self._key(principal_id))

    async def rotate(self, principal_id: str, expected: str, new: str) -> bool:
        """Replace `expected` with `new` in one atomic step.

        Args:
            principal_id: Principal whose entry is rotated.
            expected: The refresh token the caller presented.
            new: The freshly issued refresh token.

        Returns:
            True on success. False if the entry no longer holds `expected`,
            which means another request rotated or revoked it first.
        """
        rotated = await self._redis.compare_and_set(
            self._key(principal_id),
            expected,
            new,
            self._ttl_seconds,
        )
        if not rotated:
            logger.info("Refresh token rotation lost for principal %s", principal_id)
        return rotated

    async def revoke(self, principal_id: str) -> bool:
        """Delete the entry. Returns True if one existed."""
        return await self._redis.delete(self._key(principal_id))
