"""
Verification outcome types.
"""

from dataclasses import dataclass
from enum import Enum


class Outcome(Enum):
    VALID = "valid"
    INVALID = "invalid"
    ERROR = "error"


@dataclass(frozen=True)
class Verdict:
    """Result of one verification attempt."""
    address: str
    outcome: Outcome
    detail: str = ""
