"""
College Listing Filters

Value objects describing a filtered, sorted, paginated college listing.
The HTTP layer builds a CollegeFilters from query parameters; the college
repository turns it into SQL.

Acceptance rates are stored as fractions (0.0-1.0). The public API speaks
percent (bucket labels like "15-30%" and acceptanceRateMin=15), so values
are converted here, at the boundary, and nowhere else.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from college_quest.infrastructure.exceptions import ValidationError


class SortField(str, Enum):
    """Sort keys accepted by the listing endpoint."""
    NAME = "name"
    TUITION = "tuition"
    ENROLLMENT = "enrollment"
    ACCEPTANCE = "acceptance"
    LOCATION = "location"
    REGION = "region"
    TYPE = "type"
    SIZE = "size"
    NET_COST = "netCost"
    RELEVANCE = "relevance"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


# College attribute backing each sort key. RELEVANCE has no column; when it
# cannot be applied (no favorites supplied) the listing falls back to name.
SORT_COLUMNS = {
    SortField.NAME: "name",
    SortField.TUITION: "tuition_in_state",
    SortField.ENROLLMENT: "enrollment",
    SortField.ACCEPTANCE: "acceptance_rate",
    SortField.LOCATION: "state",
    SortField.REGION: "region",
    SortField.TYPE: "type",
    SortField.SIZE: "size",
    SortField.NET_COST: "net_cost",
}

# Columns matched by the free-text query (OR across all of them)
TEXT_SEARCH_COLUMNS = (
    "name",
    "city",
    "state",
    "region",
    "type",
    "description",
    "website",
)


@dataclass(frozen=True)
class AcceptanceBucket:
    """
    Named acceptance-rate interval.

    Bounds are fractions. The lowest bucket excludes 0 so schools with a
    recorded 0% (missing data in the source) never show up as "highly
    selective"; every other bucket is closed on both ends.
    """
    token: str
    label: str
    lower: float
    upper: Optional[float]
    lower_inclusive: bool = True

    def contains(self, rate: Optional[float]) -> bool:
        if rate is None:
            return False
        if self.lower_inclusive:
            if rate < self.lower:
                return False
        elif rate <= self.lower:
            return False
        return self.upper is None or rate <= self.upper


# Order matters: labels are matched by the first token they contain, and
# "50-75" must win over the open-ended "75" bucket.
ACCEPTANCE_BUCKETS: Sequence[AcceptanceBucket] = (
    AcceptanceBucket("0-15", "Highly Selective (0-15%)", 0.0, 0.15, lower_inclusive=False),
    AcceptanceBucket("15-30", "Selective (15-30%)", 0.15, 0.30),
    AcceptanceBucket("30-50", "Moderately Selective (30-50%)", 0.30, 0.50),
    AcceptanceBucket("50-75", "Less Selective (50-75%)", 0.50, 0.75),
    AcceptanceBucket("75", "Open Admission (75%+)", 0.75, None),
)


def parse_acceptance_bucket(label: str) -> AcceptanceBucket:
    """Resolve a bucket from its label or bare range ("0-15%", "75%+")."""
    for bucket in ACCEPTANCE_BUCKETS:
        if bucket.token in label:
            return bucket
    raise ValidationError(
        f"Unknown acceptance range: {label!r}",
        details={"allowed": [b.label for b in ACCEPTANCE_BUCKETS]},
    )


def split_csv(value: Optional[str]) -> List[str]:
    """Split a comma-separated query value, trimming blanks."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def percent_to_fraction(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return value / 100.0


@dataclass
class CollegeFilters:
    """Everything needed to produce one page of the college listing."""

    query: str = ""
    states: List[str] = field(default_factory=list)
    regions: List[str] = field(default_factory=list)
    types: List[str] = field(default_factory=list)
    sizes: List[str] = field(default_factory=list)
    program_categories: List[str] = field(default_factory=list)
    jesuit_only: bool = False

    tuition_min: Optional[int] = None
    tuition_max: Optional[int] = None
    enrollment_min: Optional[int] = None
    enrollment_max: Optional[int] = None

    # Fractions (0.0-1.0); ignored when acceptance_ranges is non-empty
    acceptance_rate_min: Optional[float] = None
    acceptance_rate_max: Optional[float] = None
    acceptance_ranges: List[AcceptanceBucket] = field(default_factory=list)

    favorite_ids: List[str] = field(default_factory=list)
    favorites_only: bool = False

    sort_by: SortField = SortField.NAME
    sort_order: SortOrder = SortOrder.ASC
    page: int = 1
    limit: int = 12

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValidationError("page must be >= 1", details={"page": self.page})
        if self.limit < 1:
            raise ValidationError("limit must be >= 1", details={"limit": self.limit})

    @classmethod
    def from_params(
        cls,
        *,
        query: Optional[str] = None,
        states: Optional[str] = None,
        regions: Optional[str] = None,
        types: Optional[str] = None,
        sizes: Optional[str] = None,
        program_categories: Optional[str] = None,
        jesuit_only: bool = False,
        tuition_min: Optional[int] = None,
        tuition_max: Optional[int] = None,
        enrollment_min: Optional[int] = None,
        enrollment_max: Optional[int] = None,
        acceptance_rate_min: Optional[float] = None,
        acceptance_rate_max: Optional[float] = None,
        acceptance_ranges: Optional[str] = None,
        favorite_ids: Optional[str] = None,
        favorites_only: bool = False,
        sort_by: SortField = SortField.NAME,
        sort_order: SortOrder = SortOrder.ASC,
        page: int = 1,
        limit: int = 12,
    ) -> "CollegeFilters":
        """
        Build filters from raw API parameters.

        Lists arrive comma-separated, acceptance rates arrive in percent.
        """
        return cls(
            query=(query or "").strip(),
            states=split_csv(states),
            regions=split_csv(regions),
            types=split_csv(types),
            sizes=split_csv(sizes),
            program_categories=split_csv(program_categories),
            jesuit_only=jesuit_only,
            tuition_min=tuition_min,
            tuition_max=tuition_max,
            enrollment_min=enrollment_min,
            enrollment_max=enrollment_max,
            acceptance_rate_min=percent_to_fraction(acceptance_rate_min),
            acceptance_rate_max=percent_to_fraction(acceptance_rate_max),
            acceptance_ranges=[
                parse_acceptance_bucket(label) for label in split_csv(acceptance_ranges)
            ],
            favorite_ids=split_csv(favorite_ids),
            favorites_only=favorites_only,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            limit=limit,
        )

    @property
    def offset(self) -> int:
        """Zero-based index of the first row on this page."""
        return (self.page - 1) * self.limit

    @property
    def end_index(self) -> int:
        """Inclusive zero-based index of the last row on this page."""
        return self.offset + self.limit - 1

    @property
    def uses_relevance_sort(self) -> bool:
        """Favorites-first ordering happens in memory, not in SQL."""
        return self.sort_by == SortField.RELEVANCE and bool(self.favorite_ids)

    @property
    def sort_column(self) -> str:
        return SORT_COLUMNS.get(self.sort_by, SORT_COLUMNS[SortField.NAME])

    @property
    def ascending(self) -> bool:
        return self.sort_order == SortOrder.ASC


def partition_favorites_first(rows: Iterable, favorite_ids: Iterable[str]) -> list:
    """
    Stable partition: favorited rows first, each group in original order.

    Rows are matched on str(row.id).
    """
    favorites = {fid.lower() for fid in favorite_ids}
    head, tail = [], []
    for row in rows:
        (head if str(row.id) in favorites else tail).append(row)
    return head + tail


@dataclass
class ListingPage:
    """One page of results plus the unpaginated match count."""
    items: list
    total: int

    @property
    def ids(self) -> List[str]:
        """Result ordering, for prev/next navigation on the client."""
        return [str(item.id) for item in self.items]
