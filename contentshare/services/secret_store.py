"""
Short-lived secrets (secret codes, guest tokens) kept in the cache only.

Expiry belongs to the cache: an expired key simply reads back as ``None``.
"""
from typing import Optional

import redis
from redis.exceptions import RedisError

from ..errors import DependencyFailure


def content_secret_key(content_id) -> str:
    return f"secret:content:{content_id}"


def link_secret_key(link_token: str) -> str:
    return f"secret:link:{link_token}"


def guest_token_key(link_token: str, guest_token: str) -> str:
    return f"guest:link:{link_token}:{guest_token}"


class SecretStore:
    """get/set/delete by key with a TTL. Subclasses talk to a real cache."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class RedisSecretStore(SecretStore):
    def __init__(self, client: redis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisSecretStore":
        return cls(redis.Redis.from_url(url, decode_responses=True))

    def get(self, key: str) -> Optional[str]:
        try:
            return self.client.get(key)
        except RedisError as e:
            raise DependencyFailure(f"Cache read failed for {key.split(':')[0]}") from e

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            self.client.setex(key, ttl_seconds, value)
        except RedisError as e:
            raise DependencyFailure(f"Cache write failed for {key.split(':')[0]}") from e

    def delete(self, key: str) -> None:
        try:
            self.client.delete(key)
        except RedisError as e:
            raise DependencyFailure(f"Cache delete failed for {key.split(':')[0]}") from e
