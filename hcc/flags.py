"""An ordered multiset of enabled flags."""

from __future__ import annotations

from typing import Generic, Hashable, TypeVar

T = TypeVar("T", bound=Hashable)


class Flags(Generic[T]):
    """A collection of flags; a flag may be set more than once."""

    def __init__(self) -> None:
        self._flags: list[T] = []

    def set_flag(self, v: T) -> None:
        """Add one occurrence of ``v``."""
        self._flags.append(v)

    def unset_flag(self, v: T) -> bool:
        """Remove the first occurrence of ``v``; return whether one was found."""
        try:
            self._flags.remove(v)
        except ValueError:
            return False
        return True

    def flip_flag(self, v: T) -> None:
        """Remove ``v`` if present, otherwise add it."""
        if not self.unset_flag(v):
            self.set_flag(v)

    def has_flag(self, v: T) -> bool:
        """Return whether ``v`` is set."""
        return v in self._flags

    def __contains__(self, v: object) -> bool:
        return v in self._flags

    def __repr__(self) -> str:
        return f"Flags({self._flags!r})"