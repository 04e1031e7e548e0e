from __future__ import annotations


class PausableCountdown:
    """Countdown advanced by explicit ticks; paused time does not elapse."""

    def __init__(self) -> None:
        self.remaining = 0.0
        self.running = False

    def set(self, seconds: float) -> None:
        self.remaining = max(0.0, float(seconds))

    def stop(self) -> None:
        self.running = False

    def resume(self) -> None:
        if self.remaining > 0.0:
            self.running = True

    def add(self, seconds: float) -> None:
        self.set(self.remaining + seconds)

    def tick(self, dt: float) -> float:
        if self.running and dt > 0.0:
            self.remaining = max(0.0, self.remaining - float(dt))
        return self.remaining

    def get(self) -> float:
        return self.remaining

    def expired(self) -> bool:
        return self.remaining <= 0.0

    def freeze(self) -> None:
        self.remaining = 0.0
        self.running = False


__all__ = ["PausableCountdown"]
