"""
refresher.py — periodic TOTP refresh as a cancellable background task.

A view that shows a live TOTP code (and the seconds left on it) polls the
engine once per second. TOTPRefresher owns that timer: start() schedules it,
stop() cancels it and waits for the worker thread to exit.

    with TOTPRefresher(secret, on_tick) as refresher:
        ...            # on_tick(code, remaining) fires every second
    # timer cancelled here
"""

import logging
import threading
import time
from typing import Callable, Optional

from . import base32, otp_core
from .algorithms import Algorithm

logger = logging.getLogger(__name__)

TickCallback = Callable[[str, int], None]


class TOTPRefresher:
    def __init__(
        self,
        secret_b32: str,
        callback: TickCallback,
        period: int = otp_core.DEFAULT_TIME_STEP,
        digits: int = otp_core.DEFAULT_DIGITS,
        algorithm=otp_core.DEFAULT_ALGORITHM,
        interval: float = 1.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        :param secret_b32: Base32 secret
        :param callback: called with (code, remaining_seconds) on every tick
        :param period: TOTP time step in seconds
        :param digits: number of OTP digits
        :param algorithm: Algorithm member or name
        :param interval: seconds between ticks
        :param clock: epoch-seconds source, time.time by default
        """
        if interval <= 0:
            raise ValueError("interval must be positive")
        # Fail here, not inside the worker thread.
        self.period = otp_core.check_period(period)
        self.digits = otp_core.check_digits(digits)
        self.algorithm = Algorithm.parse(algorithm)
        base32.decode(secret_b32)

        self.secret = secret_b32
        self.callback = callback
        self.interval = interval
        self.clock = clock
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def tick(self):
        """Compute the current code once and hand it to the callback."""
        code, remaining = otp_core.totp(
            self.secret,
            timestamp=int(self.clock()),
            period=self.period,
            digits=self.digits,
            algorithm=self.algorithm,
        )
        self.callback(code, remaining)
        return code, remaining

    def start(self) -> "TOTPRefresher":
        if self.running:
            raise RuntimeError("refresher already started")
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="totp-refresher", daemon=True)
        self._thread.start()
        logger.debug("TOTP refresher started (period=%ds, interval=%.2fs)", self.period, self.interval)
        return self

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
            self._thread = None
            logger.debug("TOTP refresher stopped")

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self.tick()
            except Exception:
                logger.exception("TOTP refresh callback failed, stopping refresher")
                self._stop.set()
                break
            self._stop.wait(self.interval)

    def __enter__(self) -> "TOTPRefresher":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
