"""
Recommendation Mapper

Turns classifications into a configuration profile.
"""

from .mapper import (
    recommend_profile,
    build_parallelism,
    guest_guidance,
    GUEST_GUIDANCE,
    DEFAULT_MAX_BUILD_JOBS,
    DEFAULT_MAX_GUEST_BUILD_JOBS,
)

__all__ = [
    'recommend_profile',
    'build_parallelism',
    'guest_guidance',
    'GUEST_GUIDANCE',
    'DEFAULT_MAX_BUILD_JOBS',
    'DEFAULT_MAX_GUEST_BUILD_JOBS',
]
