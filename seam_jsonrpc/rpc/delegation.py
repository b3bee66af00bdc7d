"""
Error delegation chain

Internal errors (network, parse, conversion) are first offered to the delegate of
the call's response handler, then to the endpoint's default delegate. A delegate
stops the chain by returning False from ``method_call_did_fail``.
"""

import logging
import weakref
from typing import Any, Iterable, List, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class ErrorHandler(Protocol):
    """Capability for objects that want to handle internal call failures"""

    def method_call_did_fail(self, call, error) -> bool:
        """Handle an internal error for ``call``

        Returns:
            bool: True to forward the error to the next tier, False to stop there
        """
        ...


def handles_errors(delegate: Any) -> bool:
    return delegate is not None and callable(getattr(delegate, "method_call_did_fail", None))


def weak_delegate(delegate: Any) -> Optional[weakref.ref]:
    """Weak reference to ``delegate``, or None when there is no delegate

    Raises:
        TypeError: ``delegate`` does not support weak references (a class with
            ``__slots__`` must list ``"__weakref__"``)
    """
    if delegate is None:
        return None
    try:
        return weakref.ref(delegate)
    except TypeError as e:
        raise TypeError(
            f"Delegates are held by weak reference and {type(delegate).__name__} "
            f"does not support it; add '__weakref__' to its __slots__"
        ) from e


class DelegationChain:
    """Ordered tiers of error handlers (call delegate, then endpoint delegate)"""

    MAX_TIERS = 2

    def __init__(self, handlers: Iterable[Any]):
        self.handlers: List[Any] = list(handlers)
        if len(self.handlers) > self.MAX_TIERS:
            raise ValueError(f"At most {self.MAX_TIERS} delegation tiers are supported")

    def dispatch(self, call, error) -> int:
        """Offer ``error`` to each tier in order

        Tiers that do not implement the capability are skipped. The walk stops at the
        first handler returning a falsy value; the last tier's return value is ignored.
        A handler raising an exception also stops the walk.

        Returns:
            int: Number of handlers that were invoked
        """
        invoked = 0
        for handler in self.handlers:
            if not handles_errors(handler):
                continue

            invoked += 1
            try:
                forward = handler.method_call_did_fail(call, error)
            except Exception:
                logger.exception(f"Error handler {type(handler).__name__} failed while handling {call}")
                break

            if not forward:
                break

        if invoked == 0:
            logger.debug(f"No error handler for {call}, dropping: {error}")
        return invoked
