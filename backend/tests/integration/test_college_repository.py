"""
Integration tests for the college listing query builder.

Runs the real SQL against an in-memory SQLite database.
"""

import uuid
from unittest.mock import patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from college_quest.domain.college_filters import CollegeFilters, SortField, SortOrder
from college_quest.infrastructure.db.models import College, CollegeCreate, School
from college_quest.infrastructure.db.repositories import CollegeRepository
from college_quest.infrastructure.exceptions import DatabaseError, DuplicateError, ValidationError


def college(name, state="CA", **fields):
    defaults = dict(city="Somewhere", region="West", type="Private", size="Medium")
    defaults.update(fields)
    return College(name=name, state=state, **defaults)


async def add_all(session, rows):
    session.add_all(rows)
    await session.commit()
    return rows


def search_filters(**kwargs) -> CollegeFilters:
    kwargs.setdefault("limit", 100)
    return CollegeFilters(**kwargs)


# =============================================================================
# Filtering
# =============================================================================

class TestFiltering:

    async def test_states_and_tuition_sort_page_two(self, db_session):
        """Page 2 of CA/NY by tuition descending is rows 11-20 of that set."""
        rows = [
            college(f"CA {i}", state="CA", tuition_in_state=10000 + i * 1000)
            for i in range(15)
        ] + [
            college(f"NY {i}", state="NY", tuition_in_state=10500 + i * 1000)
            for i in range(15)
        ] + [
            college(f"TX {i}", state="TX", tuition_in_state=99000 + i)
            for i in range(5)
        ]
        await add_all(db_session, rows)
        repo = CollegeRepository(db_session)

        filters = CollegeFilters.from_params(
            states="CA,NY",
            sort_by=SortField.TUITION,
            sort_order=SortOrder.DESC,
            page=2,
            limit=10,
        )
        page = await repo.search(filters)

        expected = sorted(
            (r for r in rows if r.state in ("CA", "NY")),
            key=lambda r: r.tuition_in_state,
            reverse=True,
        )[10:20]
        assert [c.name for c in page.items] == [c.name for c in expected]
        assert page.total == 30

    async def test_text_query_matches_any_column(self, db_session):
        await add_all(db_session, [
            college("Boston College", state="MA"),
            college("Alpha", state="MA", city="Boston"),
            college("Beta", state="MA", description="Near boston harbor"),
            college("Gamma", state="TX"),
        ])
        repo = CollegeRepository(db_session)

        page = await repo.search(search_filters(query="BOSTON"))

        assert {c.name for c in page.items} == {"Boston College", "Alpha", "Beta"}

    async def test_text_query_treats_wildcards_literally(self, db_session):
        await add_all(db_session, [
            college("100% Online U"),
            college("Plain U"),
        ])
        repo = CollegeRepository(db_session)

        page = await repo.search(search_filters(query="%"))

        assert [c.name for c in page.items] == ["100% Online U"]

    async def test_set_filters_and_ranges(self, db_session):
        await add_all(db_session, [
            college("Keep", type="Public", size="Large", enrollment=20000, jesuit=True),
            college("Wrong type", type="Private", size="Large", enrollment=20000, jesuit=True),
            college("Too small", type="Public", size="Large", enrollment=500, jesuit=True),
            college("Not jesuit", type="Public", size="Large", enrollment=20000, jesuit=False),
        ])
        repo = CollegeRepository(db_session)

        page = await repo.search(CollegeFilters.from_params(
            types="Public",
            sizes="Large,Medium",
            enrollment_min=1000,
            jesuit_only=True,
            limit=50,
        ))

        assert [c.name for c in page.items] == ["Keep"]


# =============================================================================
# Acceptance rate
# =============================================================================

class TestAcceptanceFilters:

    @pytest.fixture
    async def seeded(self, db_session):
        rates = {"zero": 0.0, "ten": 0.10, "fifteen": 0.15, "twenty": 0.20,
                 "sixty": 0.60, "eighty": 0.80}
        await add_all(db_session, [
            college(name, acceptance_rate=rate) for name, rate in rates.items()
        ])
        return CollegeRepository(db_session)

    async def test_buckets_override_continuous_range(self, seeded):
        page = await seeded.search(CollegeFilters.from_params(
            acceptance_ranges="0-15%",
            acceptance_rate_min=50,
            limit=50,
        ))

        assert {c.name for c in page.items} == {"ten", "fifteen"}

    async def test_buckets_are_or_combined(self, seeded):
        page = await seeded.search(CollegeFilters.from_params(
            acceptance_ranges="Selective (15-30%),Open Admission (75%+)",
            limit=50,
        ))

        assert {c.name for c in page.items} == {"fifteen", "twenty", "eighty"}

    async def test_continuous_range_in_percent(self, seeded):
        page = await seeded.search(CollegeFilters.from_params(
            acceptance_rate_min=10,
            acceptance_rate_max=20,
            limit=50,
        ))

        assert {c.name for c in page.items} == {"ten", "fifteen", "twenty"}

    async def test_unknown_bucket_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            CollegeFilters.from_params(acceptance_ranges="very picky")


# =============================================================================
# Program categories
# =============================================================================

class TestProgramCategories:

    async def test_restricts_to_colleges_with_matching_school(self, db_session):
        nursing, law, neither = await add_all(db_session, [
            college("Nursing U"), college("Law U"), college("Neither U"),
        ])
        await add_all(db_session, [
            School(name="School of Nursing", college_id=nursing.id, category="Health"),
            School(name="Second Health School", college_id=nursing.id, category="Health"),
            School(name="Law School", college_id=law.id, category="Law"),
        ])
        repo = CollegeRepository(db_session)

        page = await repo.search(CollegeFilters.from_params(program_categories="Health"))

        assert [c.name for c in page.items] == ["Nursing U"]
        assert page.total == 1

    async def test_zero_matches_skips_college_query(self, db_session):
        await add_all(db_session, [college("Some U")])
        repo = CollegeRepository(db_session)

        with patch.object(repo, "count_matching", wraps=repo.count_matching) as count:
            page = await repo.search(CollegeFilters.from_params(program_categories="Astrology"))

        assert page.items == []
        assert page.total == 0
        count.assert_not_awaited()


# =============================================================================
# Pagination
# =============================================================================

class TestPagination:

    @pytest.fixture
    async def tied_rows(self, db_session):
        # Many tuition ties so ordering relies on the id tiebreak
        return await add_all(db_session, [
            college(f"College {i:02d}", tuition_in_state=(i % 4) * 1000)
            for i in range(23)
        ])

    async def test_total_independent_of_page_and_limit(self, db_session, tied_rows):
        repo = CollegeRepository(db_session)
        totals = set()
        for page, limit in [(1, 5), (3, 5), (2, 10), (1, 100), (9, 7)]:
            result = await repo.search(CollegeFilters(
                sort_by=SortField.TUITION, page=page, limit=limit,
            ))
            totals.add(result.total)

        assert totals == {23}

    async def test_pages_cover_everything_once(self, db_session, tied_rows):
        repo = CollegeRepository(db_session)
        seen = []
        for page in range(1, 6):
            result = await repo.search(CollegeFilters(
                sort_by=SortField.TUITION, sort_order=SortOrder.DESC, page=page, limit=5,
            ))
            seen.extend(c.id for c in result.items)

        assert len(seen) == 23
        assert set(seen) == {c.id for c in tied_rows}

    async def test_page_past_end_is_empty(self, db_session, tied_rows):
        repo = CollegeRepository(db_session)
        result = await repo.search(CollegeFilters(page=10, limit=5))

        assert result.items == []
        assert result.total == 23

    async def test_large_limit_is_split_into_capped_batches(self, db_session):
        await add_all(db_session, [college(f"C{i:03d}") for i in range(30)])
        repo = CollegeRepository(db_session, batch_size=10)

        with patch.object(repo, "_fetch_batch", wraps=repo._fetch_batch) as fetch, \
                patch.object(repo, "count_matching", wraps=repo.count_matching) as count:
            result = await repo.search(CollegeFilters(page=1, limit=25))

        assert len(result.items) == 25
        assert [c.name for c in result.items] == [f"C{i:03d}" for i in range(25)]
        assert [call.args[2] for call in fetch.await_args_list] == [10, 10, 5]
        count.assert_awaited_once()

    async def test_batches_stop_at_end_of_data(self, db_session):
        await add_all(db_session, [college(f"C{i:03d}") for i in range(12)])
        repo = CollegeRepository(db_session, batch_size=10)

        with patch.object(repo, "_fetch_batch", wraps=repo._fetch_batch) as fetch:
            result = await repo.search(CollegeFilters(page=1, limit=40))

        assert len(result.items) == 12
        assert fetch.await_count == 2

    async def test_store_error_mid_listing_aborts_it(self, db_session):
        """A failed second batch raises instead of returning a partial page."""
        await add_all(db_session, [college(f"C{i:03d}") for i in range(30)])
        repo = CollegeRepository(db_session, batch_size=10)
        real_fetch = repo._fetch_batch
        calls = []

        async def fetch_failing_second_batch(stmt, offset, size):
            calls.append((offset, size))
            if len(calls) == 2:
                with patch.object(
                    db_session, "execute", side_effect=SQLAlchemyError("connection lost")
                ):
                    return await real_fetch(stmt, offset, size)
            return await real_fetch(stmt, offset, size)

        repo._fetch_batch = fetch_failing_second_batch
        page = None
        with pytest.raises(DatabaseError) as exc_info:
            page = await repo.search(CollegeFilters(page=1, limit=25))

        assert page is None
        assert calls == [(0, 10), (10, 10)]
        assert exc_info.value.details == {"operation": "select", "table": "colleges"}
        assert isinstance(exc_info.value.original_error, SQLAlchemyError)


# =============================================================================
# Favorites
# =============================================================================

class TestFavoritesOrdering:

    @pytest.fixture
    async def rows(self, db_session):
        return await add_all(db_session, [
            college(name) for name in ["Alpha", "Bravo", "Charlie", "Delta", "Echo"]
        ])

    async def test_relevance_puts_favorites_first(self, db_session, rows):
        repo = CollegeRepository(db_session)
        by_name = {c.name: c for c in rows}
        favorites = ",".join(str(by_name[n].id) for n in ["Delta", "Bravo"])

        result = await repo.search(CollegeFilters.from_params(
            favorite_ids=favorites,
            sort_by=SortField.RELEVANCE,
            limit=3,
        ))

        assert [c.name for c in result.items] == ["Bravo", "Delta", "Alpha"]
        assert result.total == 5

    async def test_relevance_second_page(self, db_session, rows):
        repo = CollegeRepository(db_session)
        favorite = str(next(c.id for c in rows if c.name == "Echo"))

        result = await repo.search(CollegeFilters.from_params(
            favorite_ids=favorite,
            sort_by=SortField.RELEVANCE,
            page=2,
            limit=2,
        ))

        assert [c.name for c in result.items] == ["Bravo", "Charlie"]

    async def test_relevance_without_favorites_sorts_by_name(self, db_session, rows):
        repo = CollegeRepository(db_session)
        result = await repo.search(CollegeFilters(sort_by=SortField.RELEVANCE, limit=2))

        assert [c.name for c in result.items] == ["Alpha", "Bravo"]

    async def test_favorites_only(self, db_session, rows):
        repo = CollegeRepository(db_session)
        wanted = [c for c in rows if c.name in ("Charlie", "Echo")]

        result = await repo.search(CollegeFilters.from_params(
            favorite_ids=",".join(str(c.id) for c in wanted),
            favorites_only=True,
        ))

        assert [c.name for c in result.items] == ["Charlie", "Echo"]

    async def test_favorites_only_without_ids_is_empty(self, db_session, rows):
        repo = CollegeRepository(db_session)
        result = await repo.search(CollegeFilters(favorites_only=True))

        assert result.items == []
        assert result.total == 0


# =============================================================================
# Other read paths
# =============================================================================

class TestLookups:

    async def test_similarity_candidates_exclude_target_in_id_order(self, db_session):
        rows = await add_all(db_session, [college(f"C{i}") for i in range(6)])
        repo = CollegeRepository(db_session)
        target = rows[0]

        candidates = await repo.get_similarity_candidates(target.id, pool_size=3)

        expected = sorted((c.id for c in rows if c.id != target.id))[:3]
        assert [c.id for c in candidates] == expected

    async def test_autocomplete(self, db_session):
        await add_all(db_session, [
            college("Boston University"),
            college("Boston College"),
            college("Northeastern"),
        ])
        repo = CollegeRepository(db_session)

        matches = await repo.autocomplete("bost", limit=10)

        assert [c.name for c in matches] == ["Boston College", "Boston University"]

    async def test_distinct_values_sorted_without_nulls(self, db_session):
        await add_all(db_session, [
            college("A", region="West"),
            college("B", region="South"),
            college("C", region="West"),
            college("D", region=None),
        ])
        repo = CollegeRepository(db_session)

        assert await repo.distinct_values("region") == ["South", "West"]

    async def test_distinct_values_rejects_other_columns(self, db_session):
        repo = CollegeRepository(db_session)
        with pytest.raises(ValidationError):
            await repo.distinct_values("description")

    async def test_admin_search_and_bulk_delete(self, db_session):
        rows = await add_all(db_session, [
            college("Cal Poly", city="San Luis Obispo"),
            college("Stanford", city="Stanford"),
            college("Rice", state="TX", city="Houston"),
        ])
        repo = CollegeRepository(db_session)

        page = await repo.admin_search(query="stan", page=1, limit=10)
        assert [c.name for c in page.items] == ["Stanford"]

        deleted = await repo.delete_many([rows[0].id, rows[2].id, uuid.uuid4()])
        assert deleted == 2
        assert await repo.count() == 1

    async def test_create_with_taken_id_is_duplicate(self, db_session):
        (existing,) = await add_all(db_session, [college("Cal Poly")])
        repo = CollegeRepository(db_session)
        data = CollegeCreate(name="Other", city="Fresno", state="CA")

        with pytest.raises(DuplicateError):
            await repo.create(data, id=existing.id)

        # Lost race: the lookup misses, the primary key rejects the insert
        db_session.expunge_all()
        with patch.object(repo, "get_by_id", return_value=None):
            with pytest.raises(DuplicateError):
                await repo.create(data, id=existing.id)

        created = await repo.create(data)
        await db_session.commit()
        assert await repo.count() == 2
        assert created.id != existing.id
