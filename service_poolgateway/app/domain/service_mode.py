"""
Process-wide service mode state.
"""

import threading
import time
from enum import Enum
from typing import Any, Dict


class ServiceMode(str, Enum):
    """Operational mode of the pool service."""
    ACTIVE = "active"
    SUSPENDED = "suspended"


class ServiceModeCell:
    """Lock-protected holder of the current ``ServiceMode``.

    One cell is created per gateway and handed to the availability guard
    and the control routes. Reads and transitions are atomic; a reader sees
    either the old or the new mode, never anything in between.
    """

    def __init__(self, initial: ServiceMode = ServiceMode.ACTIVE):
        self._lock = threading.Lock()
        self._mode = ServiceMode(initial)
        self._changed_at = time.time()

    @property
    def mode(self) -> ServiceMode:
        with self._lock:
            return self._mode

    def is_active(self) -> bool:
        return self.mode is ServiceMode.ACTIVE

    def transition(self, target: ServiceMode) -> bool:
        """Move to ``target``. Returns False when already there."""
        target = ServiceMode(target)
        with self._lock:
            if self._mode is target:
                return False
            self._mode = target
            self._changed_at = time.time()
            return True

    def suspend(self) -> bool:
        return self.transition(ServiceMode.SUSPENDED)

    def resume(self) -> bool:
        return self.transition(ServiceMode.ACTIVE)

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {"service_mode": self._mode.value, "changed_at": self._changed_at}
