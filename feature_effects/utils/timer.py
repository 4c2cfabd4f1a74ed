# feature_effects/utils/timer.py
"""Performance timing utilities for feature_effects package.

Decorators and context managers for measuring how long grid sweeps take.
"""

import time
import functools
from typing import Callable, TypeVar, Any, Optional, Dict
from contextlib import contextmanager
from collections import defaultdict
import threading

from .logger import get_logger

logger = get_logger(__name__)

F = TypeVar('F', bound=Callable[..., Any])


class PerformanceTracker:
    """Thread-safe tracker of execution times per named operation."""

    def __init__(self) -> None:
        self._stats: Dict[str, Dict[str, Any]] = defaultdict(lambda: {
            'total_time': 0.0,
            'call_count': 0,
            'min_time': float('inf'),
            'max_time': 0.0,
            'avg_time': 0.0
        })
        self._lock = threading.Lock()

    def record_execution(self, name: str, duration: float) -> None:
        """Record an execution time for a named operation.

        Args:
            name: Operation name
            duration: Execution duration in seconds
        """
        with self._lock:
            stats = self._stats[name]
            stats['total_time'] += duration
            stats['call_count'] += 1
            stats['min_time'] = min(stats['min_time'], duration)
            stats['max_time'] = max(stats['max_time'], duration)
            stats['avg_time'] = stats['total_time'] / stats['call_count']

    def get_stats(self, name: Optional[str] = None) -> Dict[str, Any]:
        """Get performance statistics, for one operation or all of them."""
        with self._lock:
            if name:
                return dict(self._stats[name]) if name in self._stats else {}
            return {k: dict(v) for k, v in self._stats.items()}

    def reset_stats(self, name: Optional[str] = None) -> None:
        """Reset performance statistics."""
        with self._lock:
            if name:
                self._stats.pop(name, None)
            else:
                self._stats.clear()


_performance_tracker = PerformanceTracker()


def timer(
    name: Optional[str] = None,
    log_result: bool = True,
    track_performance: bool = True
) -> Callable[[F], F]:
    """Decorator to time function execution.

    Args:
        name: Optional custom name for the operation
        log_result: Whether to log the execution time
        track_performance: Whether to record in global performance tracker

    Returns:
        Decorated function

    Example:
        >>> @timer(name="pdp_sweep")
        ... def sweep(dataset, adapter):
        ...     pass
    """
    def decorator(func: F) -> F:
        operation_name = name or f"{func.__module__}.{func.__qualname__}"

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = time.perf_counter()

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration = time.perf_counter() - start_time
                if log_result:
                    logger.error(f"Operation '{operation_name}' failed: {e}", extra={'duration': duration})
                raise

            duration = time.perf_counter() - start_time
            if log_result:
                logger.info(f"Operation '{operation_name}' completed", extra={'duration': duration})
            if track_performance:
                _performance_tracker.record_execution(operation_name, duration)

            return result

        return wrapper

    return decorator


@contextmanager
def timed_operation(
    name: str,
    log_result: bool = True,
    track_performance: bool = True
):
    """Context manager for timing code blocks.

    Yields:
        Dictionary with timing information, ``duration`` filled on exit

    Example:
        >>> with timed_operation("grid_build") as timing:
        ...     pass
        >>> timing['duration']
    """
    start_time = time.perf_counter()
    timing_info = {'duration': 0.0, 'start_time': start_time}

    try:
        yield timing_info
    except Exception as e:
        timing_info['duration'] = time.perf_counter() - start_time
        if log_result:
            logger.error(f"Operation '{name}' failed: {e}", extra={'duration': timing_info['duration']})
        raise

    duration = time.perf_counter() - start_time
    timing_info['duration'] = duration

    if log_result:
        logger.debug(f"Operation '{name}' completed", extra={'duration': duration})
    if track_performance:
        _performance_tracker.record_execution(name, duration)


def get_performance_stats(name: Optional[str] = None) -> Dict[str, Any]:
    """Get performance statistics from global tracker."""
    return _performance_tracker.get_stats(name)


def reset_performance_stats(name: Optional[str] = None) -> None:
    """Reset performance statistics in global tracker."""
    _performance_tracker.reset_stats(name)
