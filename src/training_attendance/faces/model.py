from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FaceMatchResult:
    """Answer of the remote face comparator. `score` is a similarity in [0, 1]."""

    matched: bool
    score: float


@dataclass(frozen=True)
class FaceVerification:
    score: float
    image_url: Optional[str] = None
