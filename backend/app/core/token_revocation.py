"""
Token Revocation System using Redis.

Implements token blacklisting to immediately invalidate JWT tokens
when users sign out.
"""

import logging
from uuid import UUID

from redis.exceptions import RedisError

from backend.app.core import redis_client as redis_module
from backend.app.core.config import settings

logger = logging.getLogger(__name__)

# Redis key prefix for blacklisted tokens
TOKEN_BLACKLIST_PREFIX = "blacklist:token:"


async def revoke_token(token: str, user_id: UUID) -> bool:
    """
    Revoke a specific JWT token by adding it to the blacklist.

    Args:
        token: The JWT token string to revoke
        user_id: Profile id that owns the token

    Returns:
        True if successfully revoked, False otherwise
    """
    try:
        # Tokens expire on their own, the blacklist entry only has to outlive them
        ttl_seconds = settings.access_token_expire_minutes * 60

        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        client = await redis_module.get_redis()
        await client.set(key, str(user_id), ex=ttl_seconds)

        return True
    except RedisError as e:
        logger.error("Error revoking token for %s: %s", user_id, e)
        return False


async def is_token_revoked(token: str) -> bool:
    """
    Check if a token has been revoked.

    Args:
        token: JWT token string to check

    Returns:
        True if token is revoked, False otherwise
    """
    try:
        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        client = await redis_module.get_redis()
        exists = await client.exists(key)
        return exists > 0
    except RedisError as e:
        # Fail-open: if Redis is down, allow the request (availability over revocation)
        logger.warning("Error checking token revocation: %s", e)
        return False
