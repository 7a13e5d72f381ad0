# -*- coding: utf-8 -*-
"""This modules implements the remote value cache

Every call a resolver makes to a remote backend goes through one of these so that
a burst of reconciliations only costs one remote call per lookup per ttl window.
"""

import logging
import threading
import time

DEFAULT_TTL = 60.0


class ValueCache():

    def __init__(self, _clock=None):
        self._entries = {}
        self.lock = threading.Lock()
        self._clock = _clock if _clock is not None else time.monotonic

    def __len__(self):
        with self.lock:
            return len(self._entries)

    def get_or_fetch(self, key, ttl, fetch_fn):
        """
        Return the value cached for key, calling fetch_fn on a miss or once the entry is
        older than ttl seconds.

        :param key: hashable lookup key, backend kind plus anything that changes the content
        :param ttl: seconds a fetched value is reused
        :param fetch_fn: zero argument callable performing the remote call
        :return: the cached or freshly fetched value
        """
        assert ttl > 0, "Cache ttl must be positive"

        # lock only held for the dictionary access never across the remote call
        # two threads missing on the same key both fetch, the last one stored wins
        with self.lock:
            entry = self._entries.get(key)
            if entry is not None:
                value, expires_at = entry
                if self._clock() < expires_at:
                    return value
                del self._entries[key]

        # exceptions propagate and nothing is stored so the next call retries
        value = fetch_fn()

        with self.lock:
            self._entries[key] = (value, self._clock() + ttl)

        logging.getLogger(__name__).debug(f"Cached {key[0] if isinstance(key, tuple) else key} "
                                          f"value for {ttl}s")
        return value

    def invalidate(self, key=None):
        with self.lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def purge_expired(self):
        now = self._clock()
        with self.lock:
            expired = [key for key, (_, expires_at) in self._entries.items()
                       if expires_at <= now]
            for key in expired:
                del self._entries[key]
        return len(expired)
