# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the refresh-token session registry."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from lms.domains.auth.session_registry import SessionRegistry
from lms.infrastructure.cache.redis_client import RedisClient, RedisError


class TestSessionRegistry:
    """Tests for SessionRegistry against an in-memory client."""

    async def test_store_and_get(self, registry: SessionRegistry, fake_redis) -> None:
        await registry.store("principal-1", "token-a")

        assert await registry.get("principal-1") == "token-a"
        assert "refresh_token:principal-1" in fake_redis.values

    async def test_store_sets_refresh_lifetime(self, registry: SessionRegistry, fake_redis) -> None:
        await registry.store("principal-1", "token-a")

        assert fake_redis.ttls["refresh_token:principal-1"] == 7 * 24 * 60 * 60

    async def test_store_replaces_previous_token(self, registry: SessionRegistry) -> None:
        await registry.store("principal-1", "token-a")
        await registry.store("principal-1", "token-b")

        assert await registry.get("principal-1") == "token-b"

    async def test_get_missing_returns_none(self, registry: SessionRegistry) -> None:
        assert await registry.get("nobody") is None

    async def test_rotate_with_expected_value(self, registry: SessionRegistry) -> None:
        await registry.store("principal-1", "token-a")

        assert await registry.rotate("principal-1", "token-a", "token-b")
        assert await registry.get("principal-1") == "token-b"

    async def test_rotate_with_stale_value_fails(self, registry: SessionRegistry) -> None:
        await registry.store("principal-1", "token-b")

        assert not await registry.rotate("principal-1", "token-a", "token-c")
        assert await registry.get("principal-1") == "token-b"

    async def test_rotate_after_revoke_fails(self, registry: SessionRegistry) -> None:
        await registry.store("principal-1", "token-a")
        await registry.revoke("principal-1")

        assert not await registry.rotate("principal-1", "token-a", "token-b")
        assert await registry.get("principal-1") is None

    async def test_revoke(self, registry: SessionRegistry) -> None:
        await registry.store("principal-1", "token-a")

        assert await registry.revoke("principal-1")
        assert not await registry.revoke("principal-1")


class TestRedisClientCompareAndSet:
    """Tests for RedisClient.compare_and_set against a mocked connection."""

    @pytest.fixture
    def client(self) -> RedisClient:
        client = RedisClient(MagicMock())
        client._redis = AsyncMock()
        return client

    async def test_runs_script_with_key_and_args(self, client: RedisClient) -> None:
        client._redis.eval.return_value = 1

        assert await client.compare_and_set("k", "old", "new", 60)

        args = client._redis.eval.call_args.args
        assert args[1:] == (1, "k", "old", "new", 60)
        assert "GET" in args[0] and "SET" in args[0]

    async def test_returns_false_when_script_declines(self, client: RedisClient) -> None:
        client._redis.eval.return_value = 0

        assert not await client.compare_and_set("k", "old", "new", 60)

    async def test_requires_connection(self) -> None:
        client = RedisClient(MagicMock())

        with pytest.raises(RedisError):
            await client.get("k")
