"""
Tests for the recommendation mapper.
"""

import itertools

import pytest
from hwprofile.core import (
    Category,
    ConfidenceTier,
    DesktopWeight,
    HardwareClassification,
    HardwareFacts,
    Hypervisor,
    VirtualizationClassification,
)
from hwprofile.recommendation import (
    GUEST_GUIDANCE,
    build_parallelism,
    guest_guidance,
    recommend_profile,
)


def hardware(category, cores=None, memory=None):
    return HardwareClassification(
        category=category,
        winning_score=60,
        confidence_tier=ConfidenceTier.HIGH,
        facts=HardwareFacts(cpu_cores=cores, memory_gb=memory),
    )


def virtualization(hypervisor):
    if hypervisor is Hypervisor.NONE:
        return VirtualizationClassification.bare_metal()
    return VirtualizationClassification(hypervisor, ConfidenceTier.HIGH, "test")


class TestTotality:
    """Every category/hypervisor pair maps to a complete profile."""

    @pytest.mark.parametrize("category,hypervisor", list(itertools.product(Category, Hypervisor)))
    def test_all_pairs(self, category, hypervisor):
        profile = recommend_profile(hardware(category, 8, 16), virtualization(hypervisor))
        assert profile.power_profile
        assert profile.cpu_governor
        assert isinstance(profile.desktop_weight, DesktopWeight)
        assert profile.build_parallelism >= 1
        assert profile.rationale

    @pytest.mark.parametrize("category,hypervisor", list(itertools.product(Category, Hypervisor)))
    def test_guests_never_full_weight(self, category, hypervisor):
        profile = recommend_profile(hardware(category, 8, 16), virtualization(hypervisor))
        if hypervisor.is_guest:
            assert profile.desktop_weight is not DesktopWeight.FULL

    @pytest.mark.parametrize("hypervisor", list(Hypervisor))
    def test_server_always_minimal(self, hypervisor):
        profile = recommend_profile(hardware(Category.SERVER, 32, 128), virtualization(hypervisor))
        assert profile.power_profile == "server"
        assert profile.desktop_weight is DesktopWeight.MINIMAL
        assert profile.cpu_governor == "ondemand"

    def test_deterministic(self):
        args = (hardware(Category.WORKSTATION, 24, 64), virtualization(Hypervisor.VMWARE))
        assert recommend_profile(*args) == recommend_profile(*args)


class TestPhysical:
    """Bare-metal defaults."""

    def test_laptop(self):
        profile = recommend_profile(hardware(Category.LAPTOP, 8, 16), virtualization(Hypervisor.NONE))
        assert profile.power_profile == "laptop"
        assert profile.desktop_weight is DesktopWeight.BALANCED
        assert profile.cpu_governor == "schedutil"

    def test_desktop(self):
        profile = recommend_profile(hardware(Category.DESKTOP, 8, 32), virtualization(Hypervisor.NONE))
        assert profile.power_profile == "desktop"
        assert profile.desktop_weight is DesktopWeight.FULL
        assert profile.cpu_governor == "performance"

    def test_workstation(self):
        profile = recommend_profile(hardware(Category.WORKSTATION, 32, 128), virtualization(Hypervisor.NONE))
        assert profile.power_profile == "workstation"
        assert profile.desktop_weight is DesktopWeight.FULL
        assert profile.build_parallelism == 8


class TestGuests:
    """Virtual machine guests."""

    def test_laptop_guest_drops_battery_profile(self):
        """A laptop-looking guest has no battery to manage."""
        profile = recommend_profile(hardware(Category.LAPTOP, 4, 8), virtualization(Hypervisor.VIRTUALBOX))
        assert profile.power_profile == "desktop"
        assert profile.cpu_governor == "performance"
        assert profile.desktop_weight is DesktopWeight.BALANCED

    def test_known_hypervisor_balanced(self):
        profile = recommend_profile(hardware(Category.DESKTOP, 4, 8), virtualization(Hypervisor.QEMU))
        assert profile.desktop_weight is DesktopWeight.BALANCED

    def test_unknown_hypervisor_minimal(self):
        profile = recommend_profile(hardware(Category.DESKTOP, 4, 8), virtualization(Hypervisor.UNKNOWN))
        assert profile.desktop_weight is DesktopWeight.MINIMAL

    def test_small_guest_minimal(self):
        profile = recommend_profile(hardware(Category.DESKTOP, 2, 2), virtualization(Hypervisor.QEMU))
        assert profile.desktop_weight is DesktopWeight.MINIMAL

    def test_guest_build_cap(self):
        profile = recommend_profile(hardware(Category.WORKSTATION, 32, 64), virtualization(Hypervisor.XEN))
        assert profile.build_parallelism == 4

    def test_custom_caps(self):
        profile = recommend_profile(
            hardware(Category.WORKSTATION, 32, 64),
            virtualization(Hypervisor.XEN),
            max_build_jobs=16,
            max_guest_build_jobs=6,
        )
        assert profile.build_parallelism == 6


class TestBuildParallelism:
    """Build job suggestions."""

    @pytest.mark.parametrize("cores,memory,guest,jobs", [
        (4, 32, False, 4),
        (32, 64, False, 8),
        (16, 8, False, 4),
        (6, 8, False, 3),
        (1, 2, False, 1),
        (2, 4, False, 1),
        (16, 32, True, 4),
        (2, 8, True, 1),
        (8, None, False, 8),
        (None, 64, False, 1),
    ])
    def test_jobs(self, cores, memory, guest, jobs):
        assert build_parallelism(cores, memory, guest)[0] == jobs

    def test_notes_explain_limits(self):
        _, notes = build_parallelism(16, 8, True)
        assert any("8 GB memory" in note for note in notes)


class TestGuestGuidance:
    """Hypervisor setup advice."""

    def test_every_hypervisor_covered(self):
        assert set(GUEST_GUIDANCE) == set(Hypervisor)

    def test_bare_metal_has_none(self):
        assert guest_guidance(Hypervisor.NONE) == ()

    def test_virtualbox(self):
        assert any("Guest Additions" in tip for tip in guest_guidance(Hypervisor.VIRTUALBOX))
