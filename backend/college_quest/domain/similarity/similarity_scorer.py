"""
Similarity Scorer

Ranks a bounded candidate pool by heuristic similarity to a target college.
"""

from typing import Any, Dict, List, Optional, Sequence

from college_quest.domain.similarity.interfaces import (
    CollegeProfile,
    ScoredCollege,
    SimilarityFactor,
)
from college_quest.domain.similarity.factors import default_factors


class SimilarityScorer:
    """
    Sums the points of every factor for each candidate.

    Ordering is a stable sort on the total, so ties keep the candidate
    pool's order; callers that need reproducible ties must supply the pool
    in a deterministic order.
    """

    def __init__(self, factors: Optional[Sequence[SimilarityFactor]] = None):
        self._factors = list(factors) if factors is not None else default_factors()

    @property
    def max_score(self) -> int:
        return sum(f.max_points for f in self._factors)

    def breakdown(
        self,
        target: CollegeProfile,
        candidate: CollegeProfile
    ) -> Dict[str, int]:
        """Points awarded by each factor, keyed by factor name."""
        return {f.name: f.score(target, candidate) for f in self._factors}

    def score(self, target: CollegeProfile, candidate: CollegeProfile) -> int:
        return sum(self.breakdown(target, candidate).values())

    def rank(
        self,
        target: Any,
        candidates: Sequence[Any],
        limit: int
    ) -> List[ScoredCollege]:
        """
        Score candidates against target and return the best `limit`.

        Args:
            target: College (or any object with College attributes)
            candidates: Candidate pool, target already excluded
            limit: Number of results to return

        Returns:
            ScoredCollege list, highest score first
        """
        target_profile = CollegeProfile.from_college(target)
        scored = [
            ScoredCollege(
                college=candidate,
                score=self.score(target_profile, CollegeProfile.from_college(candidate)),
            )
            for candidate in candidates
        ]
        scored.sort(key=lambda s: s.score, reverse=True)
        return scored[:max(limit, 0)]
