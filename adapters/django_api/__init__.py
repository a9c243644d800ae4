"""
Rewardify Django HTTP adapter.
Thin framework glue over the engine services.
"""

from adapters.django_api.wiring import (
    VENDOR_HEADER,
    RewardifyDependencies,
    build_dependencies,
    reset_dependencies,
    resolve_vendor,
)

__all__ = [
    "VENDOR_HEADER",
    "RewardifyDependencies",
    "build_dependencies",
    "reset_dependencies",
    "resolve_vendor",
]
