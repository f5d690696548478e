"""
Similar-colleges scoring.
"""

from college_quest.domain.similarity.interfaces import (
    BaseSimilarityFactor,
    CollegeProfile,
    ScoredCollege,
    SimilarityFactor,
)
from college_quest.domain.similarity.factors import (
    AbsoluteProximityFactor,
    AttributeMatchFactor,
    ProgramOverlapFactor,
    RelativeProximityFactor,
    default_factors,
)
from college_quest.domain.similarity.similarity_scorer import SimilarityScorer

__all__ = [
    "BaseSimilarityFactor",
    "CollegeProfile",
    "ScoredCollege",
    "SimilarityFactor",
    "AbsoluteProximityFactor",
    "AttributeMatchFactor",
    "ProgramOverlapFactor",
    "RelativeProximityFactor",
    "default_factors",
    "SimilarityScorer",
]
