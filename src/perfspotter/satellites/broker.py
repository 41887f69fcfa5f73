"""
Fan-out coordination over all satellites of one kind.

A broker exposes the same operations as a single adapter but runs each call
on every registered adapter concurrently and only returns once all of them
have finished. Siblings of a failing adapter are never cancelled. The broker
waits for them, then raises the first failure. Callers therefore never see a
broker call return while an adapter is still executing it.
"""

import logging
from concurrent.futures import wait
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar

from ..executor import ManagedThreadPoolExecutor, ThreadPoolConfig
from ..validation import ErrorSeverity, SpotterError, handle_satellite_error
from .base import SatelliteAdapter

logger = logging.getLogger(__name__)

A = TypeVar("A", bound=SatelliteAdapter)


class SatelliteBroker(Generic[A]):
    """
    Base class of the per-kind brokers.

    Subclasses set `kind` and `error_type`; an adapter failure that is not
    already an `error_type` is wrapped in one.
    """

    kind = "satellite"
    error_type: Type[SpotterError] = SpotterError

    def __init__(self, pool_config: Optional[ThreadPoolConfig] = None):
        self._adapters: List[A] = []
        self._pool = ManagedThreadPoolExecutor(
            pool_config or ThreadPoolConfig(thread_name_prefix=f"{self.kind.capitalize()}Broker"),
            auto_start=True,
        )

    def set_controllers(self, adapters: List[A]) -> None:
        """
        Replace the working set of adapters.

        Must not be called while a broker operation is in flight.
        """
        self._adapters = list(adapters)
        logger.info(
            f"{self.kind} broker now drives {len(self._adapters)} satellite(s): "
            f"{[a.name for a in self._adapters]}"
        )

    @property
    def adapters(self) -> List[A]:
        return list(self._adapters)

    def initialize(self) -> None:
        self._fan_out("initialize", lambda adapter: adapter.initialize())

    def get_properties(self) -> Dict[str, str]:
        """Union of all adapters' properties; later adapters win on conflicts."""
        merged: Dict[str, str] = {}
        for adapter in self._adapters:
            merged.update(adapter.get_properties())
        return merged

    def close(self) -> None:
        self._pool.shutdown(wait=True)

    def get_stats(self) -> Dict[str, Any]:
        return self._pool.get_stats()

    def _fan_out(self, operation: str, call: Callable[[A], Any]) -> List[Any]:
        """
        Run `call` on every adapter concurrently and wait for all of them.

        Returns the per-adapter results in adapter order.
        """
        adapters = list(self._adapters)
        if not adapters:
            logger.debug(f"{self.kind} broker: no satellites registered for {operation}")
            return []

        logger.debug(f"{self.kind} broker: dispatching {operation} to {len(adapters)} satellite(s)")
        futures = [self._pool.submit(call, adapter) for adapter in adapters]
        wait(futures)

        results = []
        failures = []
        for adapter, future in zip(adapters, futures):
            error = future.exception()
            if error is None:
                results.append(future.result())
                continue
            handle_satellite_error(
                error,
                adapter.name,
                operation,
                severity=ErrorSeverity.ERROR,
                reraise=False,
                logger=logger,
            )
            failures.append((adapter, error))

        if failures:
            self._raise_failure(operation, failures)
        return results

    def _raise_failure(self, operation: str, failures: List[tuple]) -> None:
        adapter, first = failures[0]
        if isinstance(first, self.error_type):
            error = first
        else:
            error = self.error_type(f"{operation} failed on satellite '{adapter.name}': {first}")
            error.__cause__ = first
        for other_adapter, other in failures[1:]:
            error.add_note(f"{operation} also failed on satellite '{other_adapter.name}': {other}")
        raise error
