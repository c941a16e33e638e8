"""Exactly-once lazy initialisation for expensive shared values.

Building a path index over the Graph description takes seconds and hundreds
of megabytes, so the registry wraps each index in a :class:`Lazy` cell:

* The first caller runs the factory while holding the cell's lock; callers
  arriving meanwhile block and then observe the same value.
* A factory that raises leaves the cell empty, so the next caller retries.
  A transient download failure is never remembered for the process lifetime.
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class Lazy(Generic[T]):
    """A thread-safe cell that computes its value on first use.

    Args:
        factory: Zero-argument callable producing the value.

    Example::

        index = Lazy(lambda: OpenApiPathIndex(load_document(source)))
        index.get()  # loads
        index.get()  # cached
    """

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory
        self._lock = threading.Lock()
        self._value: Optional[T] = None
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        """True once a value has been produced successfully."""
        return self._loaded

    def get(self) -> T:
        """Return the value, running the factory at most once successfully.

        Raises:
            Exception: Whatever the factory raised; the cell stays empty.
        """
        if self._loaded:
            return self._value  # type: ignore[return-value]
        with self._lock:
            if not self._loaded:
                self._value = self._factory()
                self._loaded = True
        return self._value  # type: ignore[return-value]

    @classmethod
    def of(cls, value: T) -> Lazy[T]:
        """Wrap an already-computed value."""
        cell = cls(lambda: value)
        cell.get()
        return cell
