"""
Process memory-pressure probe (psutil).

The local tier asks a probe before every write; this is the default one.
It reports the resident set size of the current process as a fraction of
total system memory.
"""

import psutil


class PsutilMemoryProbe:
    """``MemoryProbe`` backed by ``psutil.Process().memory_percent()``."""

    def __init__(self, process: psutil.Process | None = None):
        self._process = process or psutil.Process()

    def usage_ratio(self) -> float:
        return self._process.memory_percent() / 100.0


class StaticMemoryProbe:
    """Probe that always reports the same ratio."""

    def __init__(self, ratio: float = 0.0):
        self.ratio = ratio

    def usage_ratio(self) -> float:
        return self.ratio
