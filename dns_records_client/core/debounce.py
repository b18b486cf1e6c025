"""
Debouncer - collapse bursts of calls into one

Each call restarts the quiet window; only the value from the last call is
delivered once the window elapses.
"""

import threading
from typing import Any, Callable, Optional


class Debouncer:
    """Deliver the latest value to ``callback`` after ``wait`` quiet seconds."""

    _NOTHING = object()

    def __init__(
        self,
        callback: Callable[[Any], None],
        wait: float = 0.5,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        """
        Initialize the debouncer.

        Args:
            callback: Receives the latest value
            wait: Quiet window in seconds; 0 or less delivers immediately
            on_error: Receives exceptions raised by ``callback`` when the
                timer delivers; a direct ``flush`` raises them to its caller
        """
        self.callback = callback
        self.wait = wait
        self.on_error = on_error
        self._timer: Optional[threading.Timer] = None
        self._value: Any = self._NOTHING
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._value is not self._NOTHING

    def __call__(self, value: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._value = value
            if self.wait <= 0:
                self._timer = None
            else:
                self._timer = threading.Timer(self.wait, self._fire)
                self._timer.daemon = True
                self._timer.start()
        if self.wait <= 0:
            self.flush()

    def flush(self) -> bool:
        """Deliver a pending value now. Returns False if nothing was pending."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            value, self._value = self._value, self._NOTHING
        if value is self._NOTHING:
            return False
        self.callback(value)
        return True

    def _fire(self) -> None:
        try:
            self.flush()
        except Exception as e:
            if self.on_error is None:
                raise
            self.on_error(e)

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._value = self._NOTHING
