"""
Recommendation Mapper

Pure mapping from a hardware classification and a virtualization
classification to a configuration Profile. No I/O, no clock, no
randomness: identical inputs always give identical profiles.

The mapper is total. Every (Category, Hypervisor) pair has a defined
output; there is no unsupported combination.

Usage:
    from hwprofile.recommendation import recommend_profile

    profile = recommend_profile(hardware, virtualization)
    print(profile.power_profile, profile.desktop_weight.value, profile.build_parallelism)
"""

from typing import Dict, List, Optional, Tuple

from ..core.structures import (
    Category,
    DesktopWeight,
    HardwareClassification,
    Hypervisor,
    Profile,
    VirtualizationClassification,
)


DEFAULT_MAX_BUILD_JOBS = 8
DEFAULT_MAX_GUEST_BUILD_JOBS = 4

# Guests below this much memory get a minimal desktop
GUEST_BALANCED_MIN_MEMORY_GB = 4

# Physical defaults: (power profile, desktop weight, CPU governor)
_PHYSICAL_DEFAULTS: Dict[Category, Tuple[str, DesktopWeight, str]] = {
    Category.LAPTOP: ("laptop", DesktopWeight.BALANCED, "schedutil"),
    Category.DESKTOP: ("desktop", DesktopWeight.FULL, "performance"),
    Category.WORKSTATION: ("workstation", DesktopWeight.FULL, "performance"),
    Category.SERVER: ("server", DesktopWeight.MINIMAL, "ondemand"),
}

GUEST_GUIDANCE: Dict[Hypervisor, Tuple[str, ...]] = {
    Hypervisor.QEMU: (
        "Use VirtIO drivers for best performance",
        "Enable the SPICE and QEMU guest agents for clipboard sharing",
        "Consider virtio-gpu for graphics acceleration",
        "Use virtio-blk or virtio-scsi for storage",
    ),
    Hypervisor.VIRTUALBOX: (
        "Install VirtualBox Guest Additions",
        "Enable bidirectional clipboard sharing",
        "Configure shared folders if needed",
        "Use the VMSVGA graphics adapter",
    ),
    Hypervisor.VMWARE: (
        "Install VMware Tools (open-vm-tools)",
        "Enable shared folders and clipboard",
        "Use the VMXNET3 network adapter",
        "Consider enabling 3D acceleration",
    ),
    Hypervisor.HYPERV: (
        "Use synthetic devices for best performance",
        "Enable integration services",
        "Prefer Generation 2 VMs for UEFI support",
    ),
    Hypervisor.XEN: (
        "Use paravirtualized drivers where possible",
        "Enable Xen guest utilities",
    ),
    Hypervisor.UNKNOWN: (
        "Check for guest additions or tools for your hypervisor",
        "Use paravirtualized drivers when available",
    ),
    Hypervisor.NONE: (),
}


def build_parallelism(
    cpu_cores: Optional[int],
    memory_gb: Optional[int],
    is_guest: bool,
    max_build_jobs: int = DEFAULT_MAX_BUILD_JOBS,
    max_guest_build_jobs: int = DEFAULT_MAX_GUEST_BUILD_JOBS,
) -> Tuple[int, List[str]]:
    """
    Suggested number of parallel build jobs.

    Cores are capped at ``max_build_jobs``; machines with less than 16 GB
    get at most half their cores (and never more than 4); guests are capped
    at ``max_guest_build_jobs``.

    Returns:
        (jobs, rationale lines)
    """
    notes = []
    if cpu_cores is None:
        notes.append("CPU core count unknown: 1 build job")
        return 1, notes

    jobs = min(cpu_cores, max_build_jobs)
    notes.append(f"{cpu_cores} cores, capped at {max_build_jobs}: {jobs} build jobs")

    if memory_gb is not None and memory_gb < 16:
        limited = max(1, min(cpu_cores // 2, 4))
        if limited < jobs:
            jobs = limited
            notes.append(f"{memory_gb} GB memory: limited to {jobs} build jobs")

    if is_guest and jobs > max_guest_build_jobs:
        jobs = max_guest_build_jobs
        notes.append(f"virtual machine guest: limited to {jobs} build jobs")

    return max(1, jobs), notes


def recommend_profile(
    hardware: HardwareClassification,
    virtualization: VirtualizationClassification,
    max_build_jobs: int = DEFAULT_MAX_BUILD_JOBS,
    max_guest_build_jobs: int = DEFAULT_MAX_GUEST_BUILD_JOBS,
) -> Profile:
    """
    Map the two classifications to a configuration profile.

    Args:
        hardware: Hardware classification (category and facts are used)
        virtualization: Virtualization classification
        max_build_jobs: Upper bound on build parallelism
        max_guest_build_jobs: Upper bound on build parallelism in guests

    Returns:
        Profile with every field set
    """
    category = hardware.category
    hypervisor = virtualization.hypervisor
    facts = hardware.facts
    rationale = []

    power_profile, weight, governor = _PHYSICAL_DEFAULTS[category]
    rationale.append(f"{category.value} hardware: {power_profile} power profile, "
                     f"{weight.value} desktop, {governor} governor")

    if category is Category.SERVER:
        rationale.append("server hardware: headless-friendly minimal desktop regardless of virtualization")
    elif hypervisor.is_guest:
        if category is Category.LAPTOP:
            power_profile, governor = "desktop", "performance"
            rationale.append(f"{hypervisor.value} guest: battery management left to the host")

        memory_ok = facts.memory_gb is None or facts.memory_gb >= GUEST_BALANCED_MIN_MEMORY_GB
        if hypervisor is not Hypervisor.UNKNOWN and memory_ok:
            weight = DesktopWeight.BALANCED
        else:
            weight = DesktopWeight.MINIMAL
        rationale.append(f"{hypervisor.value} guest: {weight.value} desktop for a resource-constrained environment")
    elif category is Category.LAPTOP:
        rationale.append("physical laptop: battery-aware power management")

    jobs, notes = build_parallelism(
        facts.cpu_cores,
        facts.memory_gb,
        hypervisor.is_guest,
        max_build_jobs=max_build_jobs,
        max_guest_build_jobs=max_guest_build_jobs,
    )
    rationale.extend(notes)

    return Profile(
        power_profile=power_profile,
        desktop_weight=weight,
        build_parallelism=jobs,
        cpu_governor=governor,
        rationale=tuple(rationale),
    )


def guest_guidance(hypervisor: Hypervisor) -> Tuple[str, ...]:
    """Hypervisor-specific guest setup advice (empty on bare metal)."""
    return GUEST_GUIDANCE.get(hypervisor, ())
