# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""In-memory cache of resolved config values with daily expiry.

Every value is computed on first access and kept until the whole cache is
cleared, either explicitly or because the wall clock passed the expiration
deadline. The deadline is always the next local midnight after the last
clear, so files dropped into an externalized directory are picked up the
following day at the latest.

Key Features:

- Cache hits are served without taking the lock
- Per-key single flight: concurrent misses on the same key run the
  computation once and all callers receive the same value. A failure is
  raised in every caller; waiting threads each get their own copy of the
  exception, chained to the original with ``__cause__``
- Misses on different keys compute in parallel
- A computation that started before a clear never writes into the new
  cache generation
- None (config not found) is returned but never stored

Example:
    ```python
    from layeredconf.cache import ValueCache

    cache = ValueCache()
    value = cache.get_or_compute(("map", "server", ""), lambda: load("server"))
    cache.clear()
    ```
"""

from __future__ import annotations

from collections.abc import Callable, Hashable
import copy
from datetime import datetime, time, timedelta
import threading
from typing import Any

from layeredconf.logging import Logger, get_global_logger

_MISSING = object()


def next_midnight(now: datetime) -> datetime:
    """Return the first midnight strictly after now, in now's timezone."""
    return datetime.combine(now.date() + timedelta(days=1), time.min, tzinfo=now.tzinfo)


def _waiter_error(error: BaseException) -> BaseException:
    """Copy error so each waiting thread unwinds its own traceback."""
    try:
        fresh = copy.copy(error)
    except TypeError:
        # Constructor cannot be replayed from args
        return error
    fresh.__traceback__ = None
    fresh.__cause__ = error
    return fresh


class _Flight:
    """A computation in progress for one key."""

    __slots__ = ("done", "value", "error")

    def __init__(self) -> None:
        self.done = threading.Event()
        self.value: Any = None
        self.error: BaseException | None = None


class ValueCache:
    """Thread-safe memoizing cache cleared once per calendar day.

    Attributes:
        deadline: When the current generation expires, or None before the
            first access.
        generation: Number of clears so far.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Initialize an empty cache.

        Args:
            clock: Returns the current local time. Defaults to datetime.now.
            logger: Logger for refresh diagnostics. Defaults to the global
                logger at call time.
        """
        self._clock = clock if clock is not None else datetime.now
        self._logger = logger
        self._lock = threading.Lock()
        self._entries: dict[Hashable, Any] = {}
        self._flights: dict[Hashable, _Flight] = {}
        self.generation = 0
        self.deadline: datetime | None = None

    @property
    def logger(self) -> Logger:
        return self._logger if self._logger is not None else get_global_logger()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def get_or_compute(self, key: Hashable, compute: Callable[[], Any]) -> Any:
        """Return the cached value for key, computing it on a miss.

        Args:
            key: Cache key.
            compute: Called without arguments to produce the value. Runs at
                most once per key per cache generation, however many
                threads miss at the same time.

        Returns:
            The cached or freshly computed value. None is passed through
            but not stored, so the next call computes again.

        Raises:
            Exception: Whatever compute raises. The computing thread gets
                the original; every thread that waited on it gets a copy
                with its own traceback, chained from the original.
        """
        self._check_expiration()

        value = self._entries.get(key, _MISSING)
        if value is not _MISSING:
            return value

        with self._lock:
            value = self._entries.get(key, _MISSING)
            if value is not _MISSING:
                return value
            flight = self._flights.get(key)
            owner = flight is None
            if owner:
                flight = self._flights[key] = _Flight()
            generation = self.generation

        if not owner:
            flight.done.wait()
            if flight.error is not None:
                raise _waiter_error(flight.error)
            return flight.value

        try:
            flight.value = compute()
        except BaseException as err:
            flight.error = err
            raise
        finally:
            self._land(key, flight, generation)
        return flight.value

    def clear(self) -> None:
        """Drop every entry and start a new generation."""
        now = self._clock()
        with self._lock:
            self._clear_locked(now)
        self.logger.verbose("CACHE", "Config cache cleared")

    # -------------------------------
    # Internals
    # -------------------------------

    def _land(self, key: Hashable, flight: _Flight, generation: int) -> None:
        with self._lock:
            if self._flights.get(key) is flight:
                del self._flights[key]
            if (
                flight.error is None
                and flight.value is not None
                and generation == self.generation
            ):
                self._entries[key] = flight.value
        flight.done.set()

    def _clear_locked(self, now: datetime) -> None:
        # Lock-free readers see either the old dict or the new one
        self._entries = {}
        self._flights = {}
        self.generation += 1
        self.deadline = next_midnight(now)

    def _check_expiration(self) -> None:
        now = self._clock()
        deadline = self.deadline
        if deadline is not None and now <= deadline:
            return
        with self._lock:
            if self.deadline is not None and now <= self.deadline:
                return
            self._clear_locked(now)
        self.logger.verbose("CACHE", "Daily config cache refresh")
