"""Snowflake-style ID generator for business IDs (events, options, bets).

Generates monotonically increasing, unique string IDs. A bet id is known
before its row is written, so the placement debit can reference it.
Single-process generator; machine_id separates multiple API workers.
"""

import threading
import time


class SnowflakeIdGenerator:
    """Simple snowflake ID generator.

    Layout (64 bits):
      - 41 bits: millisecond timestamp (since custom epoch)
      - 10 bits: machine_id (0-1023)
      - 12 bits: sequence (0-4095 per millisecond)
    """

    _EPOCH_MS = 1_704_067_200_000  # 2024-01-01T00:00:00Z
    _MACHINE_BITS = 10
    _SEQUENCE_BITS = 12
    _MAX_SEQUENCE = (1 << _SEQUENCE_BITS) - 1

    def __init__(self, machine_id: int = 0) -> None:
        if not (0 <= machine_id < (1 << self._MACHINE_BITS)):
            raise ValueError(f"machine_id must be 0-{(1 << self._MACHINE_BITS) - 1}")
        self._machine_id = machine_id
        self._sequence = 0
        self._last_ms = -1
        self._lock = threading.Lock()

    def next_int(self) -> int:
        with self._lock:
            ts = self._now_ms()
            if ts < self._last_ms:
                # Clock stepped backwards: keep issuing from the last seen ms
                ts = self._last_ms
            if ts == self._last_ms:
                self._sequence = (self._sequence + 1) & self._MAX_SEQUENCE
                if self._sequence == 0:
                    ts = self._wait_next_ms(ts)
            else:
                self._sequence = 0

            self._last_ms = ts
            return (
                ((ts - self._EPOCH_MS) << (self._MACHINE_BITS + self._SEQUENCE_BITS))
                | (self._machine_id << self._SEQUENCE_BITS)
                | self._sequence
            )

    def next_id(self, prefix: str = "") -> str:
        return f"{prefix}{self.next_int()}"

    def _now_ms(self) -> int:
        return int(time.time() * 1000)

    def _wait_next_ms(self, last_ms: int) -> int:
        ts = self._now_ms()
        while ts <= last_ms:
            ts = self._now_ms()
        return ts


_default_generator = SnowflakeIdGenerator()


def generate_id(prefix: str = "") -> str:
    """Next id from the module-level generator, e.g. generate_id("BET-") -> 'BET-1234...'."""
    return _default_generator.next_id(prefix)
