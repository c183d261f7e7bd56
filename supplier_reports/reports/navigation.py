"""Navigation abstraction: the URL side of the report screen."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Literal, Mapping, Optional, Union

from supplier_reports.reports.url_codec import split_url

NavigationTrigger = Literal["imperative", "popstate", "direct"]


@dataclass(frozen=True)
class NavigationEvent:
    """Query parameters became current, and why."""

    query: dict[str, str] = field(default_factory=dict)
    trigger: NavigationTrigger = "imperative"
    path: str = ""


NavigationListener = Callable[[NavigationEvent], Awaitable[None]]


class BaseNavigator(ABC):
    """Interface for URL backends driven by the reconciliation loop."""

    def __init__(self) -> None:
        self._listeners: list[NavigationListener] = []

    def subscribe(self, listener: NavigationListener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _dispatch(self, event: NavigationEvent) -> None:
        for listener in list(self._listeners):
            await listener(event)

    @property
    @abstractmethod
    def current_query(self) -> dict[str, str]:
        """Query parameters of the current history entry."""

    @abstractmethod
    async def navigate(self, query: Mapping[str, str], *, replace: bool = True) -> None:
        """Make ``query`` current; raises NavigationError when the write fails."""


class InMemoryNavigator(BaseNavigator):
    """History stack kept in memory.

    Listeners are notified before ``navigate`` returns, the way a router emits
    query-param changes before its navigation settles.
    """

    def __init__(self, path: str = "/reports/payments", query: Optional[Mapping[str, str]] = None) -> None:
        super().__init__()
        self.path = path
        self._history: list[dict[str, str]] = [dict(query or {})]
        self._index = 0

    @property
    def current_query(self) -> dict[str, str]:
        return dict(self._history[self._index])

    @property
    def history(self) -> list[dict[str, str]]:
        return [dict(entry) for entry in self._history]

    async def navigate(self, query: Mapping[str, str], *, replace: bool = True) -> None:
        entry = dict(query)
        if entry == self._history[self._index]:
            return
        if replace:
            self._history[self._index] = entry
        else:
            self._push(entry)
        await self._dispatch(NavigationEvent(query=dict(entry), trigger="imperative", path=self.path))

    async def open(self, target: Union[str, Mapping[str, str]]) -> None:
        """Simulate a deep link or an address-bar edit."""

        if isinstance(target, str):
            path, query = split_url(target)
            if path:
                self.path = path
        else:
            query = dict(target)
        self._push(query)
        await self._dispatch(NavigationEvent(query=dict(query), trigger="direct", path=self.path))

    async def back(self) -> bool:
        if self._index == 0:
            return False
        self._index -= 1
        await self._dispatch(NavigationEvent(query=self.current_query, trigger="popstate", path=self.path))
        return True

    async def forward(self) -> bool:
        if self._index >= len(self._history) - 1:
            return False
        self._index += 1
        await self._dispatch(NavigationEvent(query=self.current_query, trigger="popstate", path=self.path))
        return True

    def _push(self, entry: dict[str, str]) -> None:
        del self._history[self._index + 1 :]
        self._history.append(entry)
        self._index += 1
