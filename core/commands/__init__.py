"""
Rewardify Command Layer
=======================
Requests are validated frozen dataclasses; refusals are RejectionReasons.
"""

from core.commands.rejection import (
    NOT_FOUND_CODES,
    ReasonCode,
    RejectionReason,
)

__all__ = [
    "NOT_FOUND_CODES",
    "ReasonCode",
    "RejectionReason",
]
