"""
Background tick driver

Steps a simulation on a fixed cadence from a daemon thread. The default
period is the engine's dt in seconds (one unit of simulation time per
wall-clock second), re-read every tick so T changes take effect on the
next tick boundary.

Pausing only stops future ticks; an in-flight step always runs to
completion. restart() drains that step (the engine lock) before reseeding.
"""

import threading
import time

from .errors import LeniaError

# Floor on the tick period; T=inf would otherwise spin at dt=0
_MIN_INTERVAL = 0.001


class SimulationDriver(threading.Thread):
    """Background thread that continuously steps a Lenia engine.

    Args:
        engine: Engine to advance (anything with step() and dt)
        on_tick: Optional callback(engine) after every step, e.g. a display refresh
        interval: Fixed period in seconds; None follows engine.dt
    """

    def __init__(self, engine, on_tick=None, interval=None):
        super().__init__(daemon=True)
        self.engine = engine
        self.on_tick = on_tick
        self.interval = interval
        self.ticks = 0
        self.last_error = None
        self._running = threading.Event()
        self._running.set()
        self._stopped = threading.Event()

    @property
    def running(self):
        return self._running.is_set()

    def _period(self):
        period = self.interval if self.interval is not None else self.engine.dt
        return max(_MIN_INTERVAL, float(period))

    def run(self):
        print("[lenia] Background simulation thread started", flush=True)
        while not self._stopped.is_set():
            now = time.perf_counter()
            if self._running.is_set():
                try:
                    self.engine.step()
                    self.ticks += 1
                    if self.on_tick is not None:
                        self.on_tick(self.engine)
                except LeniaError as e:
                    # A broken state would fail again every tick; hold until resumed
                    self.last_error = e
                    self._running.clear()
                    print(f"[lenia] Background sim error: {e}", flush=True)

            elapsed = time.perf_counter() - now
            sleep_time = max(0.0, self._period() - elapsed)
            self._stopped.wait(sleep_time)
        print("[lenia] Background simulation thread stopped", flush=True)

    def pause(self):
        self._running.clear()

    def resume(self):
        self.last_error = None
        self._running.set()

    def toggle(self):
        """Flip between running and paused. Returns the new running state."""
        if self.running:
            self.pause()
        else:
            self.resume()
        return self.running

    def restart(self, mode="patchy"):
        """Reseed the world, keeping the previous running state."""
        was_running = self.running
        self.pause()
        # reinitialize() takes the engine lock, so any in-flight step finishes first
        self.engine.reinitialize(mode)
        if self.on_tick is not None:
            self.on_tick(self.engine)
        if was_running:
            self._running.set()

    def stop(self, timeout=None):
        self._stopped.set()
        if self.is_alive() and threading.current_thread() is not self:
            self.join(timeout)
