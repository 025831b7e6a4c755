"""
Thread-safe access token cache with expiration tracking.

Tokens are cached per scope set. A token is reused until it is within the
refresh skew of its expiry, after which the next request fetches a new one.

Thread Safety:
    One lock guards the table of tokens. A second, per-scope-set lock
    serializes refreshes, so concurrent callers that miss the cache for the
    same scopes wait for a single in-flight exchange instead of each starting
    their own.

Example:
    >>> cache = TokenCache()
    >>> token = cache.get_or_acquire(
    ...     ["https://management.azure.com/.default"], fetch_token
    ... )
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Dict, FrozenSet, Iterable, Optional

from azure.core.credentials import AccessToken

from .exceptions import AuthenticationFailedError

DEFAULT_REFRESH_SKEW = 300  # seconds before expiry a cached token stops being served

ScopeKey = FrozenSet[str]


def cache_key(scopes: Iterable[str]) -> ScopeKey:
    """Order-independent key for a scope set."""
    return frozenset(scopes)


def is_expired(token: AccessToken, skew: int = 0) -> bool:
    return token.expires_on - skew <= int(time.time())


class TokenCache:
    """
    Cache of access tokens keyed by scope set.

    Args:
        refresh_skew: Seconds before ``expires_on`` at which a cached token is
            considered stale.
    """

    def __init__(self, refresh_skew: int = DEFAULT_REFRESH_SKEW):
        self.refresh_skew = refresh_skew
        self._tokens: Dict[ScopeKey, AccessToken] = {}
        self._refresh_locks: Dict[ScopeKey, threading.Lock] = {}
        self._lock = threading.Lock()

    def get(self, scopes: Iterable[str]) -> Optional[AccessToken]:
        """
        Get the cached token for ``scopes`` if it is still fresh.

        Returns:
            The cached token, or None if missing or within the refresh skew.
        """
        key = cache_key(scopes)
        with self._lock:
            token = self._tokens.get(key)
            if token and not is_expired(token, self.refresh_skew):
                return token
            return None

    def set(self, scopes: Iterable[str], token: AccessToken) -> None:
        with self._lock:
            self._tokens[cache_key(scopes)] = token

    def clear(self, scopes: Optional[Iterable[str]] = None) -> None:
        """
        Clear one or all cached tokens.

        Refresh locks for the cleared scope sets are dropped too, except
        those held by an in-flight refresh.

        Args:
            scopes: Scope set to clear. If None, clears all tokens.
        """
        with self._lock:
            if scopes is not None:
                key = cache_key(scopes)
                self._tokens.pop(key, None)
                lock = self._refresh_locks.get(key)
                if lock is not None and not lock.locked():
                    del self._refresh_locks[key]
            else:
                self._tokens.clear()
                self._refresh_locks = {
                    key: lock for key, lock in self._refresh_locks.items() if lock.locked()
                }

    def _refresh_lock(self, key: ScopeKey) -> threading.Lock:
        with self._lock:
            return self._refresh_locks.setdefault(key, threading.Lock())

    def get_or_acquire(
        self, scopes: Iterable[str], acquire: Callable[[], AccessToken]
    ) -> AccessToken:
        """
        Return a fresh cached token, or call ``acquire`` once to get one.

        Concurrent callers for the same scope set block on the in-flight
        refresh and then receive its result from the cache. If ``acquire``
        raises, the error propagates and nothing is cached; the next waiter
        makes its own attempt.

        Raises:
            AuthenticationFailedError: If ``acquire`` returned a token that is
                already expired.
        """
        key = cache_key(scopes)
        token = self.get(key)
        if token:
            return token

        with self._refresh_lock(key):
            # Another caller may have refreshed while this one waited
            token = self.get(key)
            if token:
                return token

            token = acquire()
            if is_expired(token):
                raise AuthenticationFailedError(
                    "Received an access token that has already expired"
                )
            self.set(key, token)
            return token


__all__ = ["TokenCache", "DEFAULT_REFRESH_SKEW", "cache_key", "is_expired"]
