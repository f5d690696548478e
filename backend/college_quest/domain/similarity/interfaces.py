"""
Similarity Interfaces for College Quest

Data models and the factor protocol used by the similar-colleges scorer.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class CollegeProfile:
    """
    The attributes of a college that take part in similarity scoring.

    Rates are fractions (0.0-1.0), matching storage.
    """
    region: Optional[str] = None
    state: Optional[str] = None
    type: Optional[str] = None
    size: Optional[str] = None
    jesuit: bool = False

    enrollment: Optional[int] = None
    acceptance_rate: Optional[float] = None
    tuition_in_state: Optional[int] = None
    graduation_rate: Optional[float] = None
    sat_math: Optional[int] = None
    sat_reading: Optional[int] = None

    programs: List[str] = field(default_factory=list)

    @classmethod
    def from_college(cls, college: Any) -> "CollegeProfile":
        """Build a profile from any object exposing College attributes."""
        return cls(
            region=college.region,
            state=college.state,
            type=college.type,
            size=college.size,
            jesuit=bool(college.jesuit),
            enrollment=college.enrollment,
            acceptance_rate=college.acceptance_rate,
            tuition_in_state=college.tuition_in_state,
            graduation_rate=college.graduation_rate,
            sat_math=college.sat_math,
            sat_reading=college.sat_reading,
            programs=list(college.programs or []),
        )

    @property
    def combined_sat(self) -> Optional[int]:
        """Math + reading, only when both sub-scores are present."""
        if not self.sat_math or not self.sat_reading:
            return None
        return self.sat_math + self.sat_reading


@dataclass
class ScoredCollege:
    """A candidate college with its similarity score to the target."""
    college: Any
    score: int


@runtime_checkable
class SimilarityFactor(Protocol):
    """
    Protocol for similarity factors.

    Each factor awards a fixed number of points; factors are summed
    without weighting or normalization.
    """

    @property
    def name(self) -> str:
        ...

    @property
    def max_points(self) -> int:
        """Most points this factor can award."""
        ...

    def score(self, target: CollegeProfile, candidate: CollegeProfile) -> int:
        ...


class BaseSimilarityFactor(ABC):
    """Base class for similarity factors."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def max_points(self) -> int:
        pass

    @abstractmethod
    def score(self, target: CollegeProfile, candidate: CollegeProfile) -> int:
        pass
