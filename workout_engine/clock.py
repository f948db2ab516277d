"""Tick sources for the elapsed-time and rest-countdown timers.

Both tickers run on Kivy's :data:`~kivy.clock.Clock`, so their callbacks are
serialized with user actions on the main loop. They hold no session state of
their own: every tick calls back into the state machine.
"""

from __future__ import annotations

from typing import Callable

from kivy.clock import Clock

from . import TICK_INTERVAL


class SessionClock:
    """Arm and disarm the two one-second tickers of a session.

    ``scheduler`` defaults to Kivy's global clock; tests inject any object
    exposing ``schedule_interval(callback, interval)`` that returns an event
    with a ``cancel()`` method.
    """

    def __init__(self, scheduler=None, interval: float = TICK_INTERVAL) -> None:
        self.scheduler = scheduler if scheduler is not None else Clock
        self.interval = interval
        self._elapsed_event = None
        self._rest_event = None

    @property
    def elapsed_armed(self) -> bool:
        return self._elapsed_event is not None

    @property
    def rest_armed(self) -> bool:
        return self._rest_event is not None

    def start_elapsed(self, on_tick: Callable[[], None]) -> None:
        """Arm the elapsed ticker unless it already runs."""

        if self._elapsed_event is not None:
            return
        self._elapsed_event = self.scheduler.schedule_interval(
            lambda dt: on_tick(), self.interval
        )

    def stop_elapsed(self) -> None:
        if self._elapsed_event is not None:
            self._elapsed_event.cancel()
            self._elapsed_event = None

    def arm_rest(self, on_tick: Callable[[], bool]) -> None:
        """(Re)start the rest ticker, replacing any countdown in flight.

        ``on_tick`` returns ``False`` once the countdown reached zero, which
        disarms the ticker.
        """

        self.disarm_rest()

        def _tick(dt):
            if on_tick() is False:
                self._rest_event = None
                return False
            return None

        self._rest_event = self.scheduler.schedule_interval(_tick, self.interval)

    def disarm_rest(self) -> None:
        if self._rest_event is not None:
            self._rest_event.cancel()
            self._rest_event = None

    def stop(self) -> None:
        """Disarm both tickers."""

        self.stop_elapsed()
        self.disarm_rest()
