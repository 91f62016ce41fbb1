import threading
from typing import Dict

from order_service.shared.logger import JohnWickLogger


class MetricsCollector:
    """
    In-process counters shared by a component.
    Increments are thread-safe; `report` emits the current values through the injected logger.
    """
    def __init__(self, logger: JohnWickLogger):
        self.logger = logger
        self._counters: Dict[str, int] = {}
        self._lock = threading.Lock()

    def increment(self, key: str, amount: int = 1):
        """Increment a metric counter"""
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + amount

    def reset(self, key: str):
        """Reset a specific metric"""
        with self._lock:
            self._counters[key] = 0

    def get(self, key: str) -> int:
        """Get the current value of a metric"""
        with self._lock:
            return self._counters.get(key, 0)

    def snapshot(self) -> Dict[str, int]:
        """Copy of every counter"""
        with self._lock:
            return self._counters.copy()

    def report(self):
        """Emit structured log of current metrics"""
        counters = self.snapshot()
        if counters:
            self.logger.info("Metrics update", extra=counters)
