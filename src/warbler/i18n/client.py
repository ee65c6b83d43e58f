"""Client-side navigation for interactive runtimes.

``ClientNavigator`` models what a browser runtime does on soft
navigation: load the next route's data, then swap the view, update the
location and the history stack, and handle scroll position, all without
a full page reload.

Navigations race. Only the most recent one is applied: starting a new
navigation cancels the pending one, and a result that arrives for an
outdated navigation is discarded (``NavigationAborted``, never surfaced).

Usage::

    async def load(path: str) -> dict:
        return await api.fetch_view(path)

    nav = ClientNavigator(LocaleRouter(config), load, initial_path="/tr/forum")
    unsubscribe = nav.subscribe(lambda locale: print("lang =", locale))

    view = await nav.navigate("/snippets/new")   # "/tr/snippets/new"
    await nav.back()
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

from warbler._internal.invoke import invoke
from warbler._internal.types import Loader
from warbler.errors import LocaleAlreadyResolved, NavigationAborted
from warbler.i18n.context import RequestLocaleContext
from warbler.i18n.links import RouteTargetLike
from warbler.i18n.locale import LocaleRouter

logger = logging.getLogger("warbler.navigation")

type LocaleListener = Callable[[str], None]
type _Mode = Literal["push", "replace", "traverse"]


@dataclass(slots=True)
class HistoryEntry:
    """One session history entry. ``scroll`` is saved when it is left."""

    path: str
    scroll: int = 0


@dataclass(slots=True)
class History:
    """A browser-style session history stack."""

    entries: list[HistoryEntry] = field(default_factory=list)
    index: int = -1

    @property
    def current(self) -> HistoryEntry | None:
        return self.entries[self.index] if self.index >= 0 else None

    def push(self, path: str) -> HistoryEntry:
        """Add an entry after the current one, dropping any forward entries."""
        del self.entries[self.index + 1 :]
        entry = HistoryEntry(path)
        self.entries.append(entry)
        self.index = len(self.entries) - 1
        return entry

    def replace(self, path: str) -> HistoryEntry:
        """Swap the current entry's path, keeping its position."""
        if self.current is None:
            return self.push(path)
        self.entries[self.index] = HistoryEntry(path)
        return self.entries[self.index]

    def peek(self, delta: int) -> HistoryEntry | None:
        """The entry *delta* steps away, or ``None`` past either end."""
        target = self.index + delta
        if 0 <= target < len(self.entries):
            return self.entries[target]
        return None

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True, slots=True)
class View:
    """The route currently displayed: its path, locale and loaded data."""

    path: str
    locale: str
    data: Any = None


class ClientNavigator:
    """Navigator for interactive clients (soft navigation, history, scroll).

    Args:
        router: Shared locale router (same config as the server).
        loader: Sync or async callable ``(path) -> data`` fetching the
            next route's data. Its exceptions propagate to the caller of
            ``navigate()`` and leave the displayed view unchanged.
        initial_path: The path of the page the client booted on.
        initial_data: Data for that page, if already rendered.
    """

    __slots__ = (
        "_generation",
        "_listeners",
        "_loader",
        "_pending",
        "history",
        "router",
        "scroll_y",
        "view",
    )

    def __init__(
        self,
        router: LocaleRouter,
        loader: Loader,
        *,
        initial_path: str = "/",
        initial_data: Any = None,
    ) -> None:
        self.router = router
        self._loader = loader
        self._generation = 0
        self._pending: asyncio.Task[Any] | None = None
        self._listeners: list[LocaleListener] = []
        self.history = History()
        self.history.push(initial_path)
        self.view = View(initial_path, router.resolve(initial_path), initial_data)
        self.scroll_y = 0

    # -- Navigator protocol --

    def resolve(self, source: Any = None) -> str:
        """Determine the locale for *source*; ``None`` means the displayed view's."""
        if source is None:
            return self.view.locale
        return self.router.resolve(source)

    def set_active_locale(self, locale: str) -> RequestLocaleContext:
        """Confirm the displayed view's locale.

        Each view is one render pass with exactly one locale; switching
        locale means navigating. Raises ``LocaleAlreadyResolved`` for a
        different locale.
        """
        resolved = self.router.resolve(locale)
        if resolved != self.view.locale:
            raise LocaleAlreadyResolved(self.view.locale, resolved)
        prefix, route_path = self.router.split_path(self.view.path)
        return RequestLocaleContext(
            locale=resolved,
            raw_path=self.view.path,
            route_path=route_path,
            explicit=prefix == resolved,
        )

    def render_link(self, target: RouteTargetLike, locale: str | None = None) -> str:
        """Build the path of *target* in *locale* (default: the view's)."""
        return self.router.render_link(target, locale or self.view.locale)

    def current_path(self) -> str:
        """The displayed path, locale prefix included."""
        return self.view.path

    def current_locale(self) -> str:
        return self.view.locale

    async def navigate(
        self,
        target: RouteTargetLike,
        locale: str | None = None,
        *,
        replace: bool = False,
        scroll: bool = True,
    ) -> View | None:
        """Load *target* and display it without a full reload.

        Pushes a history entry (or replaces the current one with
        ``replace=True``) and scrolls to the top unless ``scroll=False``.

        Returns the new ``View``, or ``None`` if a newer navigation
        superseded this one.

        Raises:
            MissingRouteParameter: If *target* cannot be rendered.
        """
        path = self.render_link(target, locale)
        return await self._run(path, "replace" if replace else "push", scroll=scroll)

    # -- History traversal --

    async def back(self) -> View | None:
        """Go one entry back, restoring its saved scroll position."""
        return await self._traverse(-1)

    async def forward(self) -> View | None:
        """Go one entry forward, restoring its saved scroll position."""
        return await self._traverse(1)

    async def refresh(self) -> View | None:
        """Reload the displayed route's data in place."""
        return await self._run(self.view.path, "replace", scroll=False)

    async def _traverse(self, delta: int) -> View | None:
        entry = self.history.peek(delta)
        if entry is None:
            return None
        return await self._run(entry.path, "traverse", scroll=False, delta=delta)

    # -- Locale subscription --

    def subscribe(self, listener: LocaleListener) -> Callable[[], None]:
        """Call *listener* with the new locale whenever a navigation changes it.

        Returns a function that removes the listener, for views that
        unmount before the navigator does.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -- Internal --

    async def _run(self, path: str, mode: _Mode, *, scroll: bool, delta: int = 0) -> View | None:
        self._generation += 1
        generation = self._generation
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()

        task = asyncio.ensure_future(invoke(self._loader, path))
        self._pending = task
        try:
            try:
                data = await task
            except asyncio.CancelledError:
                if generation == self._generation:
                    raise
                raise NavigationAborted(path) from None
            except Exception as exc:
                if generation == self._generation:
                    raise
                # A newer navigation owns the view; this load's failure is moot
                raise NavigationAborted(path) from exc
            if generation != self._generation:
                raise NavigationAborted(path)
        except NavigationAborted as exc:
            logger.debug("%s", exc)
            return None
        finally:
            if self._pending is task and generation == self._generation:
                self._pending = None

        self._commit(path, mode, data, scroll=scroll, delta=delta)
        return self.view

    def _commit(self, path: str, mode: _Mode, data: Any, *, scroll: bool, delta: int) -> None:
        current = self.history.current
        if current is not None:
            current.scroll = self.scroll_y

        if mode == "push":
            self.history.push(path)
        elif mode == "replace":
            saved = current.scroll if current is not None else 0
            self.history.replace(path).scroll = saved
        else:
            self.history.index += delta

        previous = self.view.locale
        self.view = View(path, self.router.resolve(path), data)

        if mode == "traverse":
            entry = self.history.current
            self.scroll_y = entry.scroll if entry is not None else 0
        elif scroll:
            self.scroll_y = 0

        logger.debug("Navigated (%s) to %s", mode, path)
        if self.view.locale != previous:
            for listener in list(self._listeners):
                listener(self.view.locale)


class DocumentLang:
    """Keeps a document's ``lang`` attribute equal to the displayed locale.

    Usage::

        lang = DocumentLang(nav)
        lang.value      # "tr"
        lang.close()    # stop tracking when the view unmounts
    """

    __slots__ = ("_unsubscribe", "value")

    def __init__(self, navigator: ClientNavigator) -> None:
        self.value = navigator.current_locale()
        self._unsubscribe = navigator.subscribe(self._update)

    def _update(self, locale: str) -> None:
        self.value = locale

    def close(self) -> None:
        self._unsubscribe()
