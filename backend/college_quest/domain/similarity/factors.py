"""
Similarity Factors

Point-awarding rules for the similar-colleges scorer. The default set
(see default_factors) sums to at most 110 points.
"""

from typing import List, Optional, Sequence, Tuple

from college_quest.domain.similarity.interfaces import (
    BaseSimilarityFactor,
    CollegeProfile,
)

# (threshold, points) pairs, checked in order; first threshold met wins
Tiers = Sequence[Tuple[float, int]]


def _tiered_points(difference: float, tiers: Tiers) -> int:
    for threshold, points in tiers:
        if difference <= threshold:
            return points
    return 0


class AttributeMatchFactor(BaseSimilarityFactor):
    """
    Fixed points when target and candidate share an attribute value.

    Plain equality, so two non-Jesuit schools match on `jesuit` just as two
    Jesuit schools do.
    """

    def __init__(self, attribute: str, points: int):
        self._attribute = attribute
        self._points = points

    @property
    def name(self) -> str:
        return f"same_{self._attribute}"

    @property
    def max_points(self) -> int:
        return self._points

    def score(self, target: CollegeProfile, candidate: CollegeProfile) -> int:
        if getattr(target, self._attribute) == getattr(candidate, self._attribute):
            return self._points
        return 0


class RelativeProximityFactor(BaseSimilarityFactor):
    """
    Points for a small relative difference |c - t| / t.

    Skipped unless both values are present and non-zero.
    """

    def __init__(self, attribute: str, tiers: Tiers):
        self._attribute = attribute
        self._tiers = tuple(tiers)

    @property
    def name(self) -> str:
        return f"{self._attribute}_proximity"

    @property
    def max_points(self) -> int:
        return max(points for _, points in self._tiers)

    def score(self, target: CollegeProfile, candidate: CollegeProfile) -> int:
        t = getattr(target, self._attribute)
        c = getattr(candidate, self._attribute)
        if not t or not c:
            return 0
        return _tiered_points(abs(c - t) / t, self._tiers)


class AbsoluteProximityFactor(BaseSimilarityFactor):
    """Points for a small absolute difference; skipped if either is null."""

    def __init__(self, attribute: str, tiers: Tiers):
        self._attribute = attribute
        self._tiers = tuple(tiers)

    @property
    def name(self) -> str:
        return f"{self._attribute}_proximity"

    @property
    def max_points(self) -> int:
        return max(points for _, points in self._tiers)

    def _value(self, profile: CollegeProfile) -> Optional[float]:
        return getattr(profile, self._attribute)

    def score(self, target: CollegeProfile, candidate: CollegeProfile) -> int:
        t = self._value(target)
        c = self._value(candidate)
        if t is None or c is None:
            return 0
        # Rounded so that 0.51 vs 0.56 lands in the <= 0.05 tier despite
        # binary float error.
        return _tiered_points(round(abs(c - t), 9), self._tiers)


class ProgramOverlapFactor(BaseSimilarityFactor):
    """+points_each per distinct shared program, capped."""

    def __init__(self, points_each: int = 2, cap: int = 10):
        self._points_each = points_each
        self._cap = cap

    @property
    def name(self) -> str:
        return "program_overlap"

    @property
    def max_points(self) -> int:
        return self._cap

    def score(self, target: CollegeProfile, candidate: CollegeProfile) -> int:
        if not target.programs or not candidate.programs:
            return 0
        shared = set(target.programs) & set(candidate.programs)
        return min(len(shared) * self._points_each, self._cap)


def default_factors() -> List[BaseSimilarityFactor]:
    """The production scoring rules."""
    return [
        AttributeMatchFactor("region", 20),
        AttributeMatchFactor("state", 10),
        AttributeMatchFactor("type", 15),
        AttributeMatchFactor("size", 10),
        AttributeMatchFactor("jesuit", 5),
        RelativeProximityFactor("enrollment", [(0.25, 10), (0.50, 5)]),
        AbsoluteProximityFactor("acceptance_rate", [(0.05, 10), (0.10, 5)]),
        RelativeProximityFactor("tuition_in_state", [(0.20, 10), (0.40, 5)]),
        AbsoluteProximityFactor("graduation_rate", [(0.05, 5), (0.10, 3)]),
        AbsoluteProximityFactor("combined_sat", [(50, 5), (100, 3)]),
        ProgramOverlapFactor(points_each=2, cap=10),
    ]
