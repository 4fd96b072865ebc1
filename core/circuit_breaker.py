# core/circuit_breaker.py
import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Listener = Callable[["CircuitBreaker"], None]


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass(frozen=True)
class BreakerPolicy:
    """
    Knobs for one breaker. Times are in milliseconds.
    A timeout_ms of 0 disables the per-call deadline.
    """

    timeout_ms: int = 5000
    error_threshold_percentage: float = 50.0
    reset_timeout_ms: int = 30000
    rolling_window_ms: int = 10000
    rolling_buckets: int = 10
    volume_threshold: int = 0


class CallFailed(Exception):
    reason: str = "call-failed"

    def __init__(
        self, breaker: str, message: str, cause: Optional[BaseException] = None
    ) -> None:
        super().__init__(message)
        self.breaker = breaker
        self.cause = cause


class CircuitOpenError(CallFailed):
    reason = "circuit-open"


class CallTimeoutError(CallFailed):
    reason = "timeout"


class UpstreamError(CallFailed):
    reason = "upstream-error"


@dataclass
class _Bucket:
    start: float
    successes: int = 0
    failures: int = 0


class RollingWindow:
    """
    Success/failure counts over the last `window_ms`, kept in fixed-width buckets.
    Old buckets fall off as time moves on, so a burst of failures stops
    counting once it is older than the window.
    """

    def __init__(self, window_ms: int, buckets: int, clock: Clock) -> None:
        self._window = window_ms / 1000.0
        self._width = self._window / max(1, buckets)
        self._clock = clock
        self._buckets: Deque[_Bucket] = deque()

    def _current(self) -> _Bucket:
        now = self._clock()
        while self._buckets and self._buckets[0].start <= now - self._window:
            self._buckets.popleft()
        if not self._buckets or now - self._buckets[-1].start >= self._width:
            self._buckets.append(_Bucket(start=now))
        return self._buckets[-1]

    def record(self, ok: bool) -> None:
        bucket = self._current()
        if ok:
            bucket.successes += 1
        else:
            bucket.failures += 1

    def counts(self) -> Tuple[int, int]:
        self._current()
        ok = sum(b.successes for b in self._buckets)
        bad = sum(b.failures for b in self._buckets)
        return ok, bad

    def reset(self) -> None:
        self._buckets.clear()


def _discard_late_result(task: "asyncio.Future[Any]") -> None:
    # Attempt already reported as timed out; retrieve the outcome so asyncio stays quiet.
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("breaker.late_failure err=%s", type(exc).__name__)


class CircuitBreaker:
    """
    Guards calls to one dependency category.

    closed: calls pass, outcomes feed the rolling window. Once the failure
      percentage over the window reaches the threshold the circuit opens.
    open: calls fail with CircuitOpenError without touching the dependency.
    half_open: entered lazily once reset_timeout_ms has passed; exactly one
      probe goes through. Success closes the circuit, failure reopens it.

    State and window updates happen between awaits on one event loop, so
    concurrent completions never interleave inside an update.
    """

    EVENTS = ("open", "close", "half_open", "success", "failure", "timeout", "reject")

    def __init__(
        self,
        name: str,
        policy: Optional[BreakerPolicy] = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.name = name
        self._policy = policy or BreakerPolicy()
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._opened_at: Optional[float] = None
        self._probe_in_flight = False
        # Bumped on every transition; outcomes from an older generation are not counted.
        self._generation = 0
        self._window = RollingWindow(
            self._policy.rolling_window_ms, self._policy.rolling_buckets, clock
        )
        self._listeners: Dict[str, List[Listener]] = {e: [] for e in self.EVENTS}

    @property
    def policy(self) -> BreakerPolicy:
        return self._policy

    @property
    def state(self) -> CircuitState:
        self._refresh_state()
        return self._state

    def on(self, event: str, callback: Listener) -> None:
        if event not in self._listeners:
            raise ValueError(f"unknown breaker event: {event}")
        self._listeners[event].append(callback)

    def _emit(self, event: str) -> None:
        for callback in self._listeners[event]:
            try:
                callback(self)
            except Exception:
                logger.exception("breaker.listener.error name=%s event=%s", self.name, event)

    async def fire(
        self, operation: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any
    ) -> Any:
        self._refresh_state()
        if self._state is CircuitState.OPEN or (
            self._state is CircuitState.HALF_OPEN and self._probe_in_flight
        ):
            self._emit("reject")
            raise CircuitOpenError(self.name, f"circuit '{self.name}' is open")

        probing = self._state is CircuitState.HALF_OPEN
        if probing:
            self._probe_in_flight = True
        generation = self._generation

        try:
            result = await self._attempt(operation, args, kwargs)
        except CallFailed:
            self._record_failure(probing, generation)
            raise
        except asyncio.CancelledError:
            if probing:
                self._probe_in_flight = False
            raise

        self._record_success(probing, generation)
        return result

    async def _attempt(
        self, operation: Callable[..., Awaitable[Any]], args: tuple, kwargs: dict
    ) -> Any:
        try:
            task = asyncio.ensure_future(operation(*args, **kwargs))
        except Exception as exc:
            raise UpstreamError(self.name, f"{self.name}: {exc!r}", cause=exc) from exc

        timeout = self._policy.timeout_ms / 1000.0 if self._policy.timeout_ms else None
        # asyncio.wait leaves the task running on timeout; no mid-flight cancellation.
        done, _ = await asyncio.wait({task}, timeout=timeout)
        if not done:
            task.add_done_callback(_discard_late_result)
            self._emit("timeout")
            raise CallTimeoutError(
                self.name, f"{self.name}: timed out after {self._policy.timeout_ms}ms"
            )

        exc = task.exception()
        if exc is not None:
            raise UpstreamError(self.name, f"{self.name}: {exc!r}", cause=exc) from exc
        return task.result()

    def _record_success(self, probing: bool, generation: int) -> None:
        if self._is_current(generation):
            self._window.record(True)
        self._emit("success")
        if probing:
            self._probe_in_flight = False
            self._close()

    def _record_failure(self, probing: bool, generation: int) -> None:
        current = self._is_current(generation)
        if current:
            self._window.record(False)
        self._emit("failure")
        if probing:
            self._probe_in_flight = False
            self._open()
        elif current and self._state is CircuitState.CLOSED and self._should_trip():
            self._open()

    def _is_current(self, generation: int) -> bool:
        if generation == self._generation:
            return True
        logger.debug("breaker.stale_outcome name=%s", self.name)
        return False

    def _should_trip(self) -> bool:
        ok, bad = self._window.counts()
        total = ok + bad
        if total == 0 or total < self._policy.volume_threshold:
            return False
        return bad * 100.0 / total >= self._policy.error_threshold_percentage

    def _reopens_in(self) -> float:
        if self._opened_at is None:
            return 0.0
        elapsed = self._clock() - self._opened_at
        return max(0.0, self._policy.reset_timeout_ms / 1000.0 - elapsed)

    def _refresh_state(self) -> None:
        if self._state is not CircuitState.OPEN or self._opened_at is None:
            return
        if self._reopens_in() <= 0:
            self._transition(CircuitState.HALF_OPEN)
            self._probe_in_flight = False
            self._emit("half_open")

    def _transition(self, state: CircuitState) -> None:
        self._state = state
        self._generation += 1

    def _open(self) -> None:
        self._transition(CircuitState.OPEN)
        self._opened_at = self._clock()
        self._emit("open")

    def _close(self) -> None:
        self._transition(CircuitState.CLOSED)
        self._opened_at = None
        self._window.reset()
        self._emit("close")

    def snapshot(self) -> Dict[str, Any]:
        """Read-only view for health reporting; never moves an open circuit to half-open."""
        ok, bad = self._window.counts()
        total = ok + bad
        retry_ms = None
        if self._state is CircuitState.OPEN:
            retry_ms = int(round(self._reopens_in() * 1000))
        return {
            "name": self.name,
            "state": self._state.value,
            "successes": ok,
            "failures": bad,
            "failureRate": round(bad * 100.0 / total, 1) if total else 0.0,
            "retryInMs": retry_ms,
        }


def _log_open(breaker: CircuitBreaker) -> None:
    logger.warning("breaker.open name=%s storage dependency degraded", breaker.name)


def _log_close(breaker: CircuitBreaker) -> None:
    logger.info("breaker.close name=%s storage dependency recovered", breaker.name)


def _log_half_open(breaker: CircuitBreaker) -> None:
    logger.info("breaker.half_open name=%s probing", breaker.name)


class BreakerRegistry:
    """One long-lived breaker per operation category, so statistics accumulate across requests."""

    def __init__(self, policy: BreakerPolicy, clock: Clock = time.monotonic) -> None:
        self._policy = policy
        self._clock = clock
        self._breakers: Dict[str, CircuitBreaker] = {}

    def get(self, category: str) -> CircuitBreaker:
        key = getattr(category, "value", category)
        breaker = self._breakers.get(key)
        if breaker is None:
            breaker = CircuitBreaker(key, self._policy, clock=self._clock)
            breaker.on("open", _log_open)
            breaker.on("close", _log_close)
            breaker.on("half_open", _log_half_open)
            self._breakers[key] = breaker
        return breaker

    def all(self) -> List[CircuitBreaker]:
        return list(self._breakers.values())
