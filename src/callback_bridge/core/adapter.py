"""
Wrap callback-style host functions so they return :class:`asyncio.Future` objects.

Host APIs following the ``func(arg1, ..., argN, callback)`` convention never
return their result; they invoke ``callback`` with zero or more values once the
operation finishes and report failures through an ambient error slot
(:mod:`callback_bridge.core.signal`) rather than through callback arguments.
:func:`promisify` turns such a function into one that can be awaited.

The host functions are usually declared variadic, so the trailing callback is
detected per call by checking whether the last positional argument is
callable. Callers may still pass one; it runs as a *secondary callback* before
the future settles.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import functools
import logging
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from .logging import get_logger, log_progress
from .signal import LastErrorSlot, last_error

LOGGER = get_logger(__name__)

AnyFuture = Union["asyncio.Future[Any]", "concurrent.futures.Future[Any]"]


class HostError(RuntimeError):
    """
    Failure reported by the host through the ambient error slot.

    Attributes
    ----------
    message:
        Message taken from the slot value, or a synthesized description.
    error:
        The raw value the host stored in the slot.
    operation:
        Qualified name of the wrapped host function.
    """

    def __init__(self, message: str, *, error: Any = None, operation: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.error = error
        self.operation = operation


def describe_error(error: Any) -> str:
    """Return the message carried by an ambient error value, or a generic description."""

    message = _extract_message(error)
    if message:
        return message
    return f"Error thrown by API {error}"


def _extract_message(error: Any) -> Optional[str]:
    if isinstance(error, str):
        return error or None
    if isinstance(error, Mapping):
        candidate = error.get("message")
    else:
        candidate = getattr(error, "message", None)
    if isinstance(candidate, str) and candidate:
        return candidate
    if isinstance(error, BaseException):
        return str(error) or None
    return None


def split_secondary_callback(args: Sequence[Any]) -> tuple[tuple[Any, ...], Optional[Callable[..., Any]]]:
    """Separate a trailing callable from positional data."""

    if args and callable(args[-1]):
        return tuple(args[:-1]), args[-1]
    return tuple(args), None


def normalize_payload(results: Sequence[Any]) -> Any:
    """Collapse completion values: none to ``None``, one to itself, several to a list."""

    if not results:
        return None
    if len(results) == 1:
        return results[0]
    return list(results)


def _future_safe(exc: Exception) -> Exception:
    # asyncio refuses StopIteration as a future exception.
    if isinstance(exc, StopIteration):
        wrapped = RuntimeError(f"{type(exc).__name__} raised by callback-style call")
        wrapped.__cause__ = exc
        return wrapped
    return exc


def _apply(future: asyncio.Future[Any], result: Any, exception: Optional[Exception], operation: str) -> None:
    if future.done():
        log_progress(
            LOGGER,
            "Completion after settlement ignored",
            level=logging.DEBUG,
            extra={"method": operation, "outcome": "cancelled" if future.cancelled() else "settled"},
        )
        return
    if exception is not None:
        future.set_exception(exception)
    else:
        future.set_result(result)


def _settle(
    loop: asyncio.AbstractEventLoop,
    future: asyncio.Future[Any],
    operation: str,
    *,
    result: Any = None,
    exception: Optional[Exception] = None,
) -> None:
    try:
        running = asyncio.get_running_loop()
    except RuntimeError:
        running = None
    if running is loop:
        _apply(future, result, exception, operation)
    else:
        loop.call_soon_threadsafe(_apply, future, result, exception, operation)


def _settle_detached(
    future: concurrent.futures.Future[Any],
    operation: str,
    *,
    result: Any = None,
    exception: Optional[Exception] = None,
) -> None:
    try:
        if exception is not None:
            future.set_exception(exception)
        else:
            future.set_result(result)
    except concurrent.futures.InvalidStateError:
        log_progress(
            LOGGER,
            "Completion after settlement ignored",
            level=logging.DEBUG,
            extra={"method": operation, "outcome": "cancelled" if future.cancelled() else "settled"},
        )


def _current_loop(loop: Optional[asyncio.AbstractEventLoop]) -> Optional[asyncio.AbstractEventLoop]:
    if loop is not None:
        return loop
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


def promisify(
    func: Callable[..., Any],
    *,
    signal: Optional[LastErrorSlot] = None,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> Callable[..., AnyFuture]:
    """
    Wrap a callback-style function so each call returns a future.

    Parameters
    ----------
    func:
        Function following ``func(arg1, ..., argN, callback)``.
    signal:
        Ambient error slot read after each completion. Defaults to
        :data:`callback_bridge.core.signal.last_error`.
    loop:
        Event loop owning the returned futures. Defaults to the loop running
        when the wrapper is called. Without either, the wrapper returns a
        :class:`concurrent.futures.Future` settled on the completing thread,
        so plain synchronous callers that pass a callback keep working;
        ``asyncio.wrap_future`` makes it awaitable.

    The returned future resolves with the normalized completion payload (see
    :func:`normalize_payload`) and rejects with:

    * the exception ``func`` raised synchronously;
    * the exception a secondary callback raised, in which case the error
      slot is not consulted;
    * :class:`HostError` when the slot holds a value after completion.

    Completion may be delivered from any thread; the slot is read on the
    delivering thread and only the settlement is scheduled onto ``loop``.
    """

    slot = signal if signal is not None else last_error
    operation = getattr(func, "__qualname__", None) or repr(func)

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> AnyFuture:
        call_args, secondary = split_secondary_callback(args)
        target_loop = _current_loop(loop)
        future: AnyFuture
        if target_loop is None:
            future = concurrent.futures.Future()
            settle = functools.partial(_settle_detached, future, operation)
        else:
            future = target_loop.create_future()
            settle = functools.partial(_settle, target_loop, future, operation)

        def on_done(*results: Any) -> None:
            if secondary is not None:
                try:
                    secondary(*results)
                except Exception as exc:
                    settle(exception=_future_safe(exc))
                    return

            error = slot.get()
            if error is not None:
                settle(exception=HostError(describe_error(error), error=error, operation=operation))
            else:
                settle(result=normalize_payload(results))

        try:
            func(*call_args, on_done, **kwargs)
        except Exception as exc:
            settle(exception=_future_safe(exc))
        return future

    return wrapper


__all__ = [
    "HostError",
    "describe_error",
    "normalize_payload",
    "promisify",
    "split_secondary_callback",
]
