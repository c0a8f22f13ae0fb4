"""
Selective installation of adapted functions on host namespaces.

Only members owned directly by the target (its ``__dict__`` or, for mapping
namespaces, its keys), named in the known set and callable are replaced.
Class-level members are shared with unrelated objects and are never touched.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, List, Mapping, MutableMapping, Optional

from .adapter import promisify
from .logging import get_logger, log_progress
from .signal import LastErrorSlot

LOGGER = get_logger(__name__)


def _own_members(target: Any) -> Mapping[str, Any]:
    if isinstance(target, MutableMapping):
        return target
    try:
        return vars(target)
    except TypeError:
        return {}


def bind_known_callbacks(
    target: Any,
    known: Iterable[str],
    *,
    signal: Optional[LastErrorSlot] = None,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> List[str]:
    """
    Replace the named callback-style members of ``target`` with future-returning wrappers.

    Parameters
    ----------
    target:
        Namespace object, module or mutable mapping. Falsy targets are skipped,
        which lets callers pass optional host namespaces unconditionally.
    known:
        Names of members following the trailing-callback convention.
    signal, loop:
        Forwarded to :func:`callback_bridge.core.adapter.promisify`.

    Returns
    -------
    list[str]
        Names that were adapted, in member order.

    Binding is not idempotent: a second call on the same object wraps the
    wrappers again.
    """

    if not target:
        return []

    names = set(known)
    members = _own_members(target)
    is_mapping = isinstance(target, MutableMapping)
    bound: List[str] = []
    for name, member in list(members.items()):
        if name not in names or not callable(member):
            continue
        adapted = promisify(member, signal=signal, loop=loop)
        if is_mapping:
            target[name] = adapted
        else:
            setattr(target, name, adapted)
        bound.append(name)

    log_progress(
        LOGGER,
        "Bound callback methods",
        level=logging.DEBUG,
        extra={"target": type(target).__name__, "count": len(bound), "method": bound},
    )
    return bound


def add_async_wrappers(
    api: Any,
    *names: str,
    signal: Optional[LastErrorSlot] = None,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> List[str]:
    """Varargs form of :func:`bind_known_callbacks`."""

    return bind_known_callbacks(api, names, signal=signal, loop=loop)


__all__ = ["add_async_wrappers", "bind_known_callbacks"]
