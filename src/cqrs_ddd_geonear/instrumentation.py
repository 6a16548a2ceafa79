"""Hooks around issued near queries (tracing, metrics, query capture).

A hook is an async callable ``hook(call, send)``. It receives the
:class:`NearCall` about to be sent and a ``send`` coroutine function, must
await ``send()`` and returns the raw ``{"dis", "obj"}`` entries, which it may
inspect or replace::

    async def timed(call, send):
        started = time.perf_counter()
        entries = await send()
        metrics.observe(call.collection, len(entries), time.perf_counter() - started)
        return entries

    near_hooks().add(timed, collections=["places*"])
"""

from __future__ import annotations

import fnmatch
import functools
import logging
from collections.abc import Awaitable, Callable, Iterable
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .options import GeoNearParams
    from .points import NearPoint

logger = logging.getLogger("cqrs_ddd.mongo.geo_near.instrumentation")

Entries = list[dict[str, Any]]
Send = Callable[[], Awaitable[Entries]]
NearHook = Callable[["NearCall", Send], Awaitable[Entries]]


@dataclass(frozen=True)
class NearCall:
    """One near query on its way to the server."""

    collection: str
    point: NearPoint
    params: GeoNearParams
    pipeline: list[dict[str, Any]]

    @property
    def attributes(self) -> dict[str, Any]:
        """Flat span/metric attributes describing the call."""
        return {
            "db.collection": self.collection,
            "geo_near.point_kind": self.point.kind,
            "geo_near.spherical": bool(self.params.stage.get("spherical", False)),
            "geo_near.lean": self.params.lean,
            "geo_near.limit": self.params.limit,
        }


class NearHooks:
    """Hooks applied to every near query, the first added outermost.

    ``collections`` restricts a hook to collection names matching any of the
    given shell-style patterns; without it the hook sees every collection.
    """

    def __init__(self) -> None:
        self._hooks: list[tuple[NearHook, tuple[str, ...]]] = []

    def __len__(self) -> int:
        return len(self._hooks)

    def add(self, hook: NearHook, *, collections: Iterable[str] = ()) -> None:
        self._hooks.append((hook, tuple(collections)))

    def remove(self, hook: NearHook) -> None:
        """Remove every registration of ``hook``; unknown hooks are ignored."""
        self._hooks = [(h, p) for h, p in self._hooks if h is not hook]

    def for_collection(self, name: str) -> list[NearHook]:
        return [
            hook
            for hook, patterns in self._hooks
            if not patterns or any(fnmatch.fnmatchcase(name, p) for p in patterns)
        ]

    async def around(self, call: NearCall, send: Send) -> Entries:
        """Run ``send`` inside every hook registered for ``call.collection``."""
        hooks = self.for_collection(call.collection)
        if hooks:
            logger.debug("%d hook(s) wrap geoNear on %s", len(hooks), call.collection)
        for hook in reversed(hooks):
            send = functools.partial(hook, call, send)
        return await send()


_near_hooks_var: ContextVar[NearHooks | None] = ContextVar(
    "geo_near_hooks", default=None
)


def near_hooks() -> NearHooks:
    """Hooks for the current context, created on first use."""
    hooks = _near_hooks_var.get()
    if hooks is None:
        hooks = NearHooks()
        _near_hooks_var.set(hooks)
    return hooks


def use_near_hooks(hooks: NearHooks | None) -> None:
    """Install ``hooks`` for the current context (``None`` resets)."""
    _near_hooks_var.set(hooks)
