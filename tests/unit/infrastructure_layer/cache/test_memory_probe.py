"""
Unit Tests for Memory Probes
"""

from unittest.mock import MagicMock

import pytest

from sugar_cache.core.interfaces import MemoryProbe
from sugar_cache.infrastructure.cache.memory_probe import PsutilMemoryProbe, StaticMemoryProbe


@pytest.mark.unit
class TestMemoryProbes:
    def test_psutil_probe_reports_ratio(self):
        process = MagicMock()
        process.memory_percent.return_value = 25.0

        assert PsutilMemoryProbe(process).usage_ratio() == 0.25

    def test_psutil_probe_on_current_process(self):
        ratio = PsutilMemoryProbe().usage_ratio()
        assert 0.0 <= ratio <= 1.0

    def test_probes_satisfy_protocol(self):
        assert isinstance(PsutilMemoryProbe(), MemoryProbe)
        assert isinstance(StaticMemoryProbe(0.3), MemoryProbe)
