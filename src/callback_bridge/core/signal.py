"""
Ambient error slot populated by hosts around completion callbacks.

Callback-style host APIs report failures out of band: the completion callback
is always invoked, and the host stores error details in a shared slot for the
duration of that invocation. :class:`LastErrorSlot` models that slot. Hosts
wrap the completion call in :meth:`LastErrorSlot.reporting`; the adapter reads
the slot once from inside the callback.

Values are kept per thread so two host threads completing operations at the
same time never observe each other's errors.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Optional


@dataclass(frozen=True, slots=True)
class HostFault:
    """Minimal error record a host may store in the slot."""

    message: Optional[str] = None
    code: Optional[str] = None

    def __str__(self) -> str:
        if self.code and self.message:
            return f"{self.code}: {self.message}"
        return self.message or self.code or "unknown host fault"


class LastErrorSlot:
    """Thread-scoped holder for the most recent host-reported failure."""

    def __init__(self) -> None:
        self._local = threading.local()

    def get(self) -> Any:
        """Return the current error value, or ``None`` when the slot is empty."""

        return getattr(self._local, "value", None)

    def set(self, error: Any) -> None:
        self._local.value = error

    def clear(self) -> None:
        self._local.value = None

    @contextmanager
    def reporting(self, error: Any) -> Iterator[None]:
        """
        Populate the slot for the duration of the block.

        Hosts use this around the completion callback invocation::

            with slot.reporting(HostFault("No tab with id 7")):
                callback()

        The previous value is restored on exit, including when the callback
        raises, so nested completions unwind correctly.
        """

        previous = getattr(self._local, "value", None)
        self.set(error)
        try:
            yield
        finally:
            self.set(previous)


last_error = LastErrorSlot()
"""Process-wide default slot consulted by adapted functions."""


__all__ = ["HostFault", "LastErrorSlot", "last_error"]
