"""
Firestore-based caching layer with TTL support.

To enable automatic TTL cleanup in Firebase Console:
1. Go to Firestore -> Indexes -> TTL Policies
2. Add TTL policy on 'cache' collection, field: 'expires_at'
"""
import asyncio
import hashlib
import logging
from datetime import datetime, timedelta, timezone

import config

logger = logging.getLogger(__name__)

CACHE_COLLECTION = "cache"


def _get_cache_key(key: str) -> str:
    """Generate a consistent document id from a cache key."""
    return hashlib.md5(key.strip().encode()).hexdigest()


def voice_cache_key(posts: list[str]) -> str:
    digest = hashlib.md5("\n\x1e\n".join(p.strip() for p in posts).encode()).hexdigest()
    return f"voice:{digest}"


def _read(key: str):
    doc = config.get_db().collection(CACHE_COLLECTION).document(_get_cache_key(key)).get()
    if not doc.exists:
        return None
    data = doc.to_dict()
    expires_at = data.get("expires_at")
    if expires_at and expires_at > datetime.now(timezone.utc):
        return data.get("payload")
    # Expired - TTL policy removes it
    return None


def _write(key: str, payload) -> None:
    now = datetime.now(timezone.utc)
    config.get_db().collection(CACHE_COLLECTION).document(_get_cache_key(key)).set({
        "payload": payload,
        "cache_key": key.strip(),
        "expires_at": now + timedelta(minutes=config.CACHE_TTL_MINUTES),
        "created_at": now,
    })


async def get_cached(key: str):
    """
    Retrieve a cached payload if it exists and hasn't expired.
    Returns None on cache miss, expiry, or a store error.
    """
    if not config.CACHE_ENABLED:
        return None
    try:
        return await asyncio.to_thread(_read, key)
    except Exception:
        logger.exception("[cache] read failed for %s", key)
        return None


async def set_cached(key: str, payload) -> None:
    """Store a payload in cache with TTL."""
    if not config.CACHE_ENABLED or not payload:
        return
    try:
        await asyncio.to_thread(_write, key, payload)
    except Exception:
        logger.exception("[cache] write failed for %s", key)


def clear_all_cache() -> int:
    """
    Delete all documents from the cache collection.
    Returns the number of documents deleted.
    """
    count = 0
    for doc in config.get_db().collection(CACHE_COLLECTION).stream():
        doc.reference.delete()
        count += 1
    return count


if __name__ == "__main__":
    # Run this file directly to clear all cache
    deleted = clear_all_cache()
    print(f"Cleared {deleted} cached entries.")
