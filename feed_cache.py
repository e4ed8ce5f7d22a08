# feed_cache.py
# The cached feed artifact and the storage backends it lives in

import os
import threading
import time
from contextlib import contextmanager

from errors import PersistenceFailure

REFRESH_ALWAYS = "always"
REFRESH_MISSING = "missing"
REFRESH_MAX_AGE = "max-age"
REFRESH_POLICIES = (REFRESH_ALWAYS, REFRESH_MISSING, REFRESH_MAX_AGE)


class CacheBackend:
    """Whole-value storage keyed by feed identity."""

    def read(self, key):
        raise NotImplementedError

    def write(self, key, data):
        raise NotImplementedError

    def age(self, key):
        """Seconds since key was last written, None if absent."""
        raise NotImplementedError

    def lock(self, key):
        raise NotImplementedError


class _LockRegistry:
    def __init__(self):
        self._guard = threading.Lock()
        self._locks = {}

    def get(self, name):
        with self._guard:
            return self._locks.setdefault(name, threading.Lock())


class MemoryCacheBackend(CacheBackend):
    def __init__(self):
        self._values = {}
        self._locks = _LockRegistry()

    def read(self, key):
        value = self._values.get(key)
        return value[0] if value else None

    def write(self, key, data):
        self._values[key] = (bytes(data), time.monotonic())

    def age(self, key):
        value = self._values.get(key)
        if value is None:
            return None
        return time.monotonic() - value[1]

    @contextmanager
    def lock(self, key):
        with self._locks.get(key):
            yield


# Shared by every FileCacheBackend so two backends on one directory still exclude each other
_FILE_LOCKS = _LockRegistry()


class FileCacheBackend(CacheBackend):
    """One file per key. Writes go through a temp file and os.replace."""

    def __init__(self, directory):
        self.directory = directory

    def path(self, key):
        return os.path.join(self.directory, key)

    def read(self, key):
        try:
            with open(self.path(key), "rb") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise PersistenceFailure(f"Could not read feed cache {self.path(key)}: {e}") from e

    def write(self, key, data):
        target = self.path(key)
        tmp_path = None
        try:
            os.makedirs(self.directory, exist_ok=True)
            # One temp name per writer thread; open() leaves the mode to the umask
            tmp_path = os.path.join(self.directory, f".{key}.{os.getpid()}.{threading.get_ident()}.tmp")
            with open(tmp_path, "wb") as f:
                f.write(data)
            os.replace(tmp_path, target)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise PersistenceFailure(f"Could not write feed cache {target}: {e}") from e

    def age(self, key):
        try:
            return max(0.0, time.time() - os.path.getmtime(self.path(key)))
        except FileNotFoundError:
            return None

    @contextmanager
    def lock(self, key):
        with _FILE_LOCKS.get(os.path.abspath(self.path(key))):
            yield


class FeedCache:
    """The single cached artifact for one feed, and the rule for when it may be reused."""

    def __init__(self, backend, key, policy=REFRESH_ALWAYS, max_age=3600.0):
        if policy not in REFRESH_POLICIES:
            raise ValueError(f"Unknown refresh policy: {policy!r}")
        self.backend = backend
        self.key = key
        self.policy = policy
        self.max_age = max_age

    @classmethod
    def from_config(cls, config, backend=None):
        backend = backend or FileCacheBackend(config.cache_dir)
        return cls(backend, config.cache_key, config.refresh_policy, config.max_age)

    def load(self):
        return self.backend.read(self.key)

    def save(self, data):
        self.backend.write(self.key, data)

    def is_fresh(self):
        """Whether the stored artifact can be served without republishing."""
        if self.policy == REFRESH_ALWAYS:
            return False
        age = self.backend.age(self.key)
        if age is None:
            return False
        if self.policy == REFRESH_MISSING:
            return True
        return age < self.max_age

    def locked(self):
        return self.backend.lock(self.key)
