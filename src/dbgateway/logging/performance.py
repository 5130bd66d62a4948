"""Performance logging for dbgateway operations.

Connectors time every catalogue query and statement execution through a
``PerformanceLogger``; the aggregated figures are exposed for diagnostics.

Classes:
    TimingContext: Timing of a single measured operation
    OperationMetrics: Aggregated timings for one operation name
    PerformanceLogger: Measures operations and logs their duration

Example:
    >>> perf_logger = PerformanceLogger("connector.sqlite")
    >>> with perf_logger.measure("execute_sql") as timer:
    ...     rows = await cursor.fetchall()
    >>> timer.duration_ms
    0.41
"""

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Generator, Optional

from .structured import StructuredLogger


@dataclass
class TimingContext:
    """Timing for a single measured operation.

    Attributes:
        operation: Operation name
        start_time: perf_counter value at start
        end_time: perf_counter value at completion
        metadata: Context passed to ``measure``
        success: Whether the block completed without raising
        error: Error message when the block raised
    """
    operation: str
    start_time: float
    end_time: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    success: bool = True
    error: Optional[str] = None

    def complete(self, success: bool = True, error: Optional[str] = None) -> None:
        self.end_time = time.perf_counter()
        self.success = success
        self.error = error

    @property
    def duration(self) -> Optional[float]:
        """Duration in seconds, or None while the block is running."""
        if self.end_time is None:
            return None
        return self.end_time - self.start_time

    @property
    def duration_ms(self) -> Optional[float]:
        duration = self.duration
        return duration * 1000 if duration is not None else None


@dataclass
class OperationMetrics:
    """Aggregated timings for one operation name."""
    operation: str
    total_calls: int = 0
    failed_calls: int = 0
    total_duration: float = 0.0
    min_duration: Optional[float] = None
    max_duration: Optional[float] = None

    def add_timing(self, timing: TimingContext) -> None:
        duration = timing.duration
        if duration is None:
            return

        self.total_calls += 1
        if not timing.success:
            self.failed_calls += 1
        self.total_duration += duration
        if self.min_duration is None or duration < self.min_duration:
            self.min_duration = duration
        if self.max_duration is None or duration > self.max_duration:
            self.max_duration = duration

    @property
    def avg_duration(self) -> Optional[float]:
        if self.total_calls == 0:
            return None
        return self.total_duration / self.total_calls

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "total_calls": self.total_calls,
            "failed_calls": self.failed_calls,
            "total_duration": self.total_duration,
            "min_duration": self.min_duration,
            "max_duration": self.max_duration,
            "avg_duration": self.avg_duration,
        }


class PerformanceLogger:
    """Performance monitoring and timing.

    Example:
        >>> perf_logger = PerformanceLogger("connector.postgres")
        >>> with perf_logger.measure("get_tables", schema="public"):
        ...     ...
        >>> perf_logger.get_metrics("get_tables").total_calls
        1
    """

    def __init__(
        self,
        name: str,
        *,
        auto_log: bool = True,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        """Initialize performance logger.

        Args:
            name: Logger name
            auto_log: Log every completed measurement at debug level
            logger: Underlying structured logger
        """
        self.name = name
        self.auto_log = auto_log
        self._logger = logger or StructuredLogger(f"perf.{name}")
        self._metrics: Dict[str, OperationMetrics] = {}

    @contextmanager
    def measure(self, operation: str, **metadata: Any) -> Generator[TimingContext, None, None]:
        """Measure the duration of a block.

        Args:
            operation: Operation name
            **metadata: Context recorded with the measurement

        Yields:
            TimingContext, completed when the block exits
        """
        timing = TimingContext(
            operation=operation,
            start_time=time.perf_counter(),
            metadata=metadata,
        )
        try:
            yield timing
        except BaseException as e:
            timing.complete(success=False, error=str(e))
            raise
        else:
            timing.complete()
        finally:
            self._record(timing)

    def _record(self, timing: TimingContext) -> None:
        metrics = self._metrics.get(timing.operation)
        if metrics is None:
            metrics = self._metrics[timing.operation] = OperationMetrics(timing.operation)
        metrics.add_timing(timing)

        if self.auto_log:
            self._logger.debug(
                "Operation timed",
                operation=timing.operation,
                duration_ms=timing.duration_ms,
                success=timing.success,
                **timing.metadata,
            )

    def get_metrics(self, operation: str) -> Optional[OperationMetrics]:
        return self._metrics.get(operation)

    def get_all_metrics(self) -> Dict[str, Dict[str, Any]]:
        return {name: metrics.to_dict() for name, metrics in self._metrics.items()}
