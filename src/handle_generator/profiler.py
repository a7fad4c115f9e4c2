"""Performance profiler for conversion runs."""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional

import psutil


@dataclass
class PerformanceMetrics:
    """Performance metrics of one conversion run."""
    operation_name: str
    duration: float
    input_size: int
    output_size: int
    items_emitted: int
    memory_start_mb: float
    memory_peak_mb: float
    memory_end_mb: float
    throughput_mbps: float


class PerformanceProfiler:
    """
    Records duration, memory usage and throughput of conversion runs.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.metrics_history: List[PerformanceMetrics] = []
        self.current_operation: Optional[str] = None
        self.start_time: Optional[float] = None
        self.start_memory: float = 0
        self.peak_memory: float = 0
        self.input_size = 0
        self.output_size = 0
        self.items_emitted = 0

    @contextmanager
    def profile_operation(self, operation_name: str) -> Iterator['PerformanceProfiler']:
        """
        Context manager for profiling an operation.

        Metrics are recorded even when the operation raises.
        """
        self.start_profiling(operation_name)
        try:
            yield self
        finally:
            self.stop_profiling()

    def start_profiling(self, operation_name: str):
        self.current_operation = operation_name
        self.start_time = time.perf_counter()
        self.start_memory = self._memory_mb()
        self.peak_memory = self.start_memory
        self.input_size = 0
        self.output_size = 0
        self.items_emitted = 0
        self.logger.debug(f"Started profiling: {operation_name}")

    def record(self, input_size: Optional[int] = None, output_size: int = 0, items: int = 0):
        """Add sizes and counts to the active session and sample memory."""
        if not self.current_operation:
            return
        if input_size is not None:
            self.input_size = input_size
        self.output_size += output_size
        self.items_emitted += items
        self.peak_memory = max(self.peak_memory, self._memory_mb())

    def stop_profiling(self) -> PerformanceMetrics:
        """
        Stop profiling and return metrics.

        Raises:
            ValueError: If no profiling session is active
        """
        if not self.current_operation or self.start_time is None:
            raise ValueError("No active profiling session")

        duration = time.perf_counter() - self.start_time
        end_memory = self._memory_mb()
        throughput = (self.input_size / 1024 / 1024) / duration if duration > 0 else 0

        metrics = PerformanceMetrics(
            operation_name=self.current_operation,
            duration=duration,
            input_size=self.input_size,
            output_size=self.output_size,
            items_emitted=self.items_emitted,
            memory_start_mb=self.start_memory,
            memory_peak_mb=max(self.peak_memory, end_memory),
            memory_end_mb=end_memory,
            throughput_mbps=throughput
        )
        self.metrics_history.append(metrics)
        self.current_operation = None
        self.start_time = None

        self.logger.info(
            f"{metrics.operation_name}: {metrics.items_emitted} items, "
            f"{metrics.input_size / 1024:.1f}KB in, {metrics.output_size / 1024:.1f}KB out, "
            f"{metrics.duration:.3f}s, peak memory {metrics.memory_peak_mb:.1f}MB"
        )
        return metrics

    def _memory_mb(self) -> float:
        try:
            return psutil.Process().memory_info().rss / 1024 / 1024
        except psutil.Error as e:
            self.logger.warning(f"Memory sampling failed: {e}")
            return self.start_memory
