"""
Tests for core data structures.
"""

import dataclasses

import pytest
from hwprofile.core import (
    Category,
    CATEGORY_PRIORITY,
    ConfidenceTier,
    Hypervisor,
    Signal,
    VirtualizationClassification,
)


class TestSignal:
    """Test Signal construction and rendering."""

    def test_available_signal(self):
        signal = Signal.of('battery_count', 0, ConfidenceTier.HIGH, "/sys/class/power_supply")
        assert signal.available
        assert signal.value == 0
        assert signal.source_confidence is ConfidenceTier.HIGH

    def test_unavailable_is_distinct_from_absent(self):
        """An unreadable source is not the same as a reported zero."""
        absent = Signal.of('battery_count', 0)
        missing = Signal.unavailable('battery_count', "no sysfs")
        assert absent != missing
        assert not missing.available
        assert missing.value is None

    def test_str(self):
        assert str(Signal.of('network_interfaces', ('wired', 'wireless'))) == \
            "network_interfaces: wired, wireless"
        assert str(Signal.of('network_interfaces', ())) == "network_interfaces: (none)"
        assert str(Signal.unavailable('chassis_type')) == "chassis_type: unavailable"

    def test_frozen(self):
        signal = Signal.of('cpu_cores', 8)
        with pytest.raises(dataclasses.FrozenInstanceError):
            signal.value = 16


class TestEnums:
    """Test category and hypervisor enums."""

    def test_category_priority_covers_all(self):
        assert set(CATEGORY_PRIORITY) == set(Category)
        assert CATEGORY_PRIORITY[0] is Category.DESKTOP

    def test_hypervisor_is_guest(self):
        assert not Hypervisor.NONE.is_guest
        assert all(h.is_guest for h in Hypervisor if h is not Hypervisor.NONE)


class TestVirtualizationClassification:
    """Test the bare-metal result."""

    def test_bare_metal(self):
        result = VirtualizationClassification.bare_metal()
        assert result.hypervisor is Hypervisor.NONE
        assert result.confidence_tier is ConfidenceTier.HIGH
        assert not result.is_guest
