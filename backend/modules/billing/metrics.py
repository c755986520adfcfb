"""
Latency telemetry for billing backend calls.

When a caller supplies a metrics context, each wrapped call emits one
``billing.performance.<operation>`` flow event carrying the elapsed time.
Emission problems are logged and never affect the call's outcome.
"""

import logging
import time
from typing import Any, Awaitable, Callable, Optional, Protocol, TypeVar

from .models import MetricsContext

logger = logging.getLogger(__name__)

PERFORMANCE_EVENT_PREFIX = "billing.performance"

T = TypeVar("T")


class IFlowEventEmitter(Protocol):
    """Sink for structured flow events."""

    def flow_event(self, data: dict[str, Any]) -> None:
        ...


class LoggingFlowEventEmitter:
    """Writes flow events to the ``subgate.flow`` logger."""

    def __init__(self, logger_name: str = "subgate.flow"):
        self._logger = logging.getLogger(logger_name)

    def flow_event(self, data: dict[str, Any]) -> None:
        self._logger.info(data.get("event", "flow"), extra={"flow_event": data})


class MetricsRecorder:
    """Measures wrapped calls and emits performance flow events."""

    def __init__(
        self,
        emitter: Optional[IFlowEventEmitter] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the recorder.

        Args:
            emitter: Event sink; defaults to LoggingFlowEventEmitter
            clock: Wall clock in seconds (tests inject a fake)
        """
        self._emitter = emitter or LoggingFlowEventEmitter()
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    async def wrap(
        self,
        operation: str,
        metrics_context: Optional[MetricsContext],
        fn: Callable[[], Awaitable[T]],
    ) -> T:
        """
        Run ``fn`` and emit a performance event if a context is present.

        The event is emitted whether ``fn`` succeeds or raises; its exception
        propagates unchanged.
        """
        if metrics_context is None:
            return await fn()

        start = self._now_ms()
        try:
            return await fn()
        finally:
            end = self._now_ms()
            self._emit(operation, metrics_context, end, end - start)

    def _emit(
        self,
        operation: str,
        metrics_context: MetricsContext,
        event_time: int,
        elapsed: int,
    ) -> None:
        try:
            self._emitter.flow_event(
                {
                    **metrics_context.to_event_fields(),
                    "event": f"{PERFORMANCE_EVENT_PREFIX}.{operation}",
                    "time": event_time,
                    "flow_time": elapsed,
                }
            )
        except Exception as e:
            logger.error(f"Failed to emit performance event for {operation}: {e}")
