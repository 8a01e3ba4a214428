"""A value that is either "everything allowed" or a specific allowed collection."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

T = TypeVar("T")

_ALL: Any = object()


class AllOrSome(Generic[T]):
    """Either ``All`` (anything is allowed, like ``*``) or ``Some(value)``.

    ``AllOrSome()`` is the ``All`` variant; ``AllOrSome(value)`` is ``Some(value)``.
    """

    __slots__ = ("_value",)
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, value: T = _ALL) -> None:
        self._value = value

    @classmethod
    def all(cls) -> AllOrSome[T]:
        """Return the ``All`` variant."""
        return cls()

    @classmethod
    def some(cls, value: T) -> AllOrSome[T]:
        """Return the ``Some`` variant wrapping ``value``."""
        return cls(value)

    def is_all(self) -> bool:
        """Return whether this is the ``All`` variant."""
        return self._value is _ALL

    def is_some(self) -> bool:
        """Return whether this is the ``Some`` variant."""
        return not self.is_all()

    @property
    def value(self) -> T | None:
        """The wrapped value for ``Some``, or ``None`` for ``All``."""
        return None if self.is_all() else self._value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AllOrSome):
            return NotImplemented
        if self.is_all() or other.is_all():
            return self.is_all() and other.is_all()
        return bool(self._value == other._value)

    def __repr__(self) -> str:
        if self.is_all():
            return "AllOrSome.all()"
        return f"AllOrSome.some({self._value!r})"