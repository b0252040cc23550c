"""Storage collaborator interfaces used by the notification pipeline."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Iterable, Iterator, List, Optional, TypeVar

from ..models import Issue, Rule, UserRecord

T = TypeVar("T")


class CloseableIterator(Generic[T]):
    """Forward-only iterator over a resource that must be released.

    Use it as a context manager so the resource is released on every exit
    path. ``close()`` releases at most once; later calls do nothing.
    """

    def __init__(self, source: Iterator[T], on_close: Optional[Callable[[], None]] = None) -> None:
        self._source = source
        self._on_close = on_close
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> "CloseableIterator[T]":
        return self

    def __next__(self) -> T:
        if self._closed:
            raise StopIteration
        return next(self._source)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            self._on_close()

    def __enter__(self) -> "CloseableIterator[T]":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class IssueCache(ABC):
    """Issues computed by the analysis, readable once per traversal."""

    @abstractmethod
    def traverse(self) -> CloseableIterator[Issue]:
        """
        Open a new forward-only pass over every cached issue.

        Each returned iterator is independent and must be closed by the
        caller.
        """
        pass


class RuleRepository(ABC):
    """Lookup of rule metadata by rule key."""

    @abstractmethod
    def get_by_key(self, rule_key: str) -> Rule:
        """
        Return the rule for ``rule_key``.

        Raises:
            RuleNotFoundError: If no rule has this key
        """
        pass


class Session(ABC):
    """A scoped unit of storage access; released when the ``with`` block ends."""

    @abstractmethod
    def close(self) -> None:
        pass

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class SessionFactory(ABC):
    """Opens storage sessions."""

    @abstractmethod
    def open_session(self) -> Session:
        pass


class UserStore(ABC):
    """Read access to user records."""

    @abstractmethod
    def select_by_uuids(self, session: Any, uuids: Iterable[str]) -> List[UserRecord]:
        """
        Return the users whose uuid is in ``uuids``.

        Unknown uuids are skipped; they are not an error.
        """
        pass
