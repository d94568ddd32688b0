from __future__ import annotations

from typing import Generic, Iterable, Iterator, Optional, TypeVar

__all__ = ["EntryCursor"]

T = TypeVar("T")


class EntryCursor(Generic[T]):
    """Peekable cursor over an iterable.

    Exposes ``done`` and the current ``value`` without consuming it; ``step()``
    advances by one. ``value`` is undefined (``None``) once ``done`` is true.
    Stepping an exhausted cursor is a no-op. Also usable as an iterator, in
    which case ``next()`` returns the current value and steps.
    """

    def __init__(self, items: Iterable[T] = ()) -> None:
        self._it: Iterator[T] = iter(items)
        self._done = False
        self._value: Optional[T] = None
        self.step()

    @property
    def done(self) -> bool:
        return self._done

    @property
    def value(self) -> Optional[T]:
        return self._value

    def step(self) -> None:
        if self._done:
            return
        try:
            self._value = next(self._it)
        except StopIteration:
            self._done = True
            self._value = None

    def __iter__(self) -> "EntryCursor[T]":
        return self

    def __next__(self) -> T:
        if self._done:
            raise StopIteration
        current = self._value
        self.step()
        return current  # type: ignore[return-value]
