"""
Dirty-checking digest loop.

A digest repeatedly walks a scope subtree, evaluating every live watcher and
comparing the result with the last observed value. Listeners of the watchers
that changed run once the walk is over; the loop ends with the first walk that
finds no change, or fails once ``ttl`` dirty iterations were not enough.
"""
import asyncio
import logging
from collections import deque
from typing import TYPE_CHECKING, Any, Callable, Optional

from ..errors import DigestInProgressError, DigestNotStabilizingError
from .watchers import Expression, Watcher

if TYPE_CHECKING:
    from .scope import Scope

logger = logging.getLogger(__name__)

ExceptionHandler = Callable[[BaseException, Optional[str]], Any]

DEFAULT_TTL = 10
# Iterations kept for DigestNotStabilizingError diagnostics
WATCH_LOG_SIZE = 5


def log_and_raise(exception: BaseException, cause: Optional[str] = None) -> None:
    logger.error("Error in %s: %s", cause or "scope callback", exception, exc_info=exception)
    raise exception


class DigestEngine:
    """Digest state shared by every scope of one tree."""

    def __init__(
            self,
            root: "Scope",
            ttl: int = DEFAULT_TTL,
            exception_handler: Optional[ExceptionHandler] = None
    ) -> None:
        assert ttl >= 1, "Digest TTL must be at least 1"
        self.root = root
        self.ttl = ttl
        self.exception_handler: ExceptionHandler = exception_handler or log_and_raise
        self.phase: Optional[str] = None
        self.passes = 0

        self.async_queue: deque[tuple["Scope", Expression]] = deque()
        self.post_digest_queue: deque[Callable[[], Any]] = deque()
        self.apply_async_queue: deque[tuple["Scope", Expression]] = deque()
        self._apply_async_handle: Optional[asyncio.Handle] = None

    def begin_phase(self, phase: str) -> None:
        if self.phase is not None:
            logger.error("Cannot start %s: %s already in progress", phase, self.phase)
            raise DigestInProgressError(self.phase)
        self.phase = phase

    def clear_phase(self) -> None:
        self.phase = None

    def digest(self, scope: "Scope") -> int:
        """
        Run the loop over ``scope`` and its descendants.

        :return: Number of iterations it took to stabilize.
        :raises DigestNotStabilizingError: After ``ttl`` dirty iterations.
        :raises DigestInProgressError: If called from inside a digest or apply.
        """
        self.begin_phase("digest")

        if scope is self.root and self._apply_async_handle is not None:
            self._apply_async_handle.cancel()
            self._flush_apply_async()

        try:
            iterations = self._loop(scope)
        finally:
            self.clear_phase()

        while self.post_digest_queue:
            fn = self.post_digest_queue.popleft()
            try:
                fn()
            except Exception as e:
                self.exception_handler(e, "post-digest callback")

        return iterations

    def apply(self, scope: "Scope", expression: Expression = None) -> Any:
        self.begin_phase("apply")
        try:
            return scope.eval(expression)
        except Exception as e:
            self.exception_handler(e, "apply")
        finally:
            self.clear_phase()
            self.digest(self.root)

    def eval_async(self, scope: "Scope", expression: Expression) -> None:
        if self.phase is None and not self.async_queue:
            loop = _running_loop()
            if loop is not None:
                logger.debug("Scheduling digest for async evaluation")
                loop.call_soon(self._digest_pending_async)
        self.async_queue.append((scope, expression))

    def apply_async(self, scope: "Scope", expression: Expression) -> None:
        """
        Queue ``expression`` and apply the whole batch in a single digest
        on the next turn of the running event loop.

        :raises RuntimeError: If no asyncio event loop is running.
        """
        loop = asyncio.get_running_loop()
        self.apply_async_queue.append((scope, expression))
        if self._apply_async_handle is None:
            self._apply_async_handle = loop.call_soon(self._apply_async_batch)

    def post_digest(self, fn: Callable[[], Any]) -> None:
        self.post_digest_queue.append(fn)

    def _digest_pending_async(self) -> None:
        if self.phase is None and self.async_queue and not self.root.destroyed:
            self.digest(self.root)

    def _apply_async_batch(self) -> None:
        self.apply(self.root, lambda scope: self._flush_apply_async())

    def _flush_apply_async(self) -> None:
        self._apply_async_handle = None
        while self.apply_async_queue:
            scope, expression = self.apply_async_queue.popleft()
            try:
                scope.eval(expression)
            except Exception as e:
                self.exception_handler(e, "apply_async")

    def _loop(self, scope: "Scope") -> int:
        watch_log: deque[list[tuple]] = deque(maxlen=WATCH_LOG_SIZE)
        iteration = 0

        while True:
            iteration += 1
            self._drain_async_queue()

            self.passes += 1
            changes = self._walk(scope, self.passes)

            for owner, watcher, new, old in changes:
                if not watcher.active:
                    continue
                try:
                    watcher.listener(new, old)
                except Exception as e:
                    self.exception_handler(e, f"listener of watcher '{watcher.label}'")

            if changes:
                watch_log.append([(watcher.label, new, old) for _, watcher, new, old in changes])
            elif not self.async_queue:
                logger.debug("Digest of scope #%d stable after %d iteration(s)", scope.id, iteration)
                return iteration

            if iteration > self.ttl:
                labels = [watcher.label for _, watcher, _, _ in changes]
                logger.error("Digest did not stabilize after %d iterations; still changing: %s",
                             self.ttl, labels)
                raise DigestNotStabilizingError(self.ttl, labels, list(watch_log))

    def _drain_async_queue(self) -> None:
        while self.async_queue:
            scope, expression = self.async_queue.popleft()
            if scope.destroyed:
                continue
            try:
                scope.eval(expression)
            except Exception as e:
                self.exception_handler(e, "eval_async")

    def _walk(self, scope: "Scope", current_pass: int) -> list[tuple["Scope", Watcher, Any, Any]]:
        """Evaluate watchers depth-first, parents before children."""
        changes = []
        stack = [scope]
        while stack:
            current = stack.pop()
            if current.destroyed:
                continue
            for watcher in current.watchers:
                if not watcher.active or watcher.since >= current_pass:
                    continue
                try:
                    result = watcher.check(current)
                except Exception as e:
                    self.exception_handler(e, f"watcher '{watcher.label}'")
                    continue
                if result is not None:
                    changes.append((current, watcher, *result))
            stack.extend(reversed(current.children))
        return changes


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None
