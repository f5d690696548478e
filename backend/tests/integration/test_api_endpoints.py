"""
Integration tests for the public college and school endpoints.

Repositories are replaced through dependency overrides so only the HTTP
layer, filter parsing and similarity ranking run for real.
"""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from college_quest.domain.college_filters import ListingPage, SortField
from college_quest.infrastructure.db.dependencies import (
    get_college_repository,
    get_school_repository,
)
from college_quest.infrastructure.db.models import College, School
from college_quest.infrastructure.exceptions import DatabaseError


def make_college(name="Test College", **fields) -> College:
    defaults = dict(city="Boston", state="MA", region="Northeast", type="Private", size="Medium")
    defaults.update(fields)
    return College(name=name, **defaults)


@pytest.fixture
def college_repo(app):
    repo = MagicMock()
    repo.search = AsyncMock(return_value=ListingPage(items=[], total=0))
    repo.get_by_id = AsyncMock(return_value=None)
    repo.update = AsyncMock(return_value=None)
    repo.get_similarity_candidates = AsyncMock(return_value=[])
    repo.autocomplete = AsyncMock(return_value=[])
    repo.distinct_values = AsyncMock(return_value=[])
    app.dependency_overrides[get_college_repository] = lambda: repo
    return repo


@pytest.fixture
def school_repo(app):
    repo = MagicMock()
    repo.distinct_categories = AsyncMock(return_value=[])
    repo.list_for_colleges = AsyncMock(return_value=[])
    app.dependency_overrides[get_school_repository] = lambda: repo
    return repo


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_root_endpoint(self, client: TestClient):
        response = client.get("/")
        assert response.status_code == 200
        assert "message" in response.json()

    def test_health_endpoint(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestCollegeListing:

    def test_query_parameters_become_filters(self, client, college_repo):
        colleges = [make_college("Expensive", tuition_in_state=60000)]
        college_repo.search.return_value = ListingPage(items=colleges, total=31)

        response = client.get(
            "/api/colleges",
            params={
                "states": "CA,NY",
                "sortBy": "tuition",
                "sortOrder": "desc",
                "page": 2,
                "limit": 10,
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 31
        assert body["colleges"][0]["name"] == "Expensive"
        assert body["colleges"][0]["tuitionInState"] == 60000

        filters = college_repo.search.await_args.args[0]
        assert filters.states == ["CA", "NY"]
        assert filters.sort_by == SortField.TUITION
        assert filters.ascending is False
        assert (filters.offset, filters.end_index) == (10, 19)

    def test_response_carries_page_order(self, client, college_repo):
        colleges = [make_college("Zeta"), make_college("Alpha")]
        college_repo.search.return_value = ListingPage(items=colleges, total=2)

        body = client.get("/api/colleges").json()

        assert body["ids"] == [str(c.id) for c in colleges]
        assert body["ids"] == [c["id"] for c in body["colleges"]]

    def test_default_page_size(self, client, college_repo):
        client.get("/api/colleges")

        filters = college_repo.search.await_args.args[0]
        assert filters.page == 1
        assert filters.limit == 12

    def test_acceptance_percent_converted(self, client, college_repo):
        client.get("/api/colleges", params={"acceptanceRateMin": 15, "acceptanceRateMax": 30})

        filters = college_repo.search.await_args.args[0]
        assert filters.acceptance_rate_min == pytest.approx(0.15)
        assert filters.acceptance_rate_max == pytest.approx(0.30)

    def test_unknown_acceptance_bucket_is_400(self, client, college_repo):
        response = client.get("/api/colleges", params={"acceptanceRanges": "picky"})

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"
        college_repo.search.assert_not_awaited()

    @pytest.mark.parametrize("params", [
        {"limit": 5001},
        {"limit": 0},
        {"page": 0},
        {"sortBy": "vibes"},
        {"sortOrder": "sideways"},
    ])
    def test_invalid_paging_or_sort_is_422(self, client, college_repo, params):
        response = client.get("/api/colleges", params=params)
        assert response.status_code == 422

    def test_store_failure_is_500(self, client, college_repo):
        college_repo.search.side_effect = DatabaseError("boom", operation="select", table="colleges")

        response = client.get("/api/colleges")

        assert response.status_code == 500
        assert response.json()["message"] == "Internal server error"


class TestCollegeDetail:

    def test_not_found(self, client, college_repo):
        response = client.get(f"/api/colleges/{uuid.uuid4()}")
        assert response.status_code == 404

    def test_found(self, client, college_repo):
        college = make_college("Found U", acceptance_rate=0.42)
        college_repo.get_by_id.return_value = college

        response = client.get(f"/api/colleges/{college.id}")

        assert response.status_code == 200
        assert response.json()["acceptanceRate"] == 0.42

    def test_update_requires_auth(self, client, college_repo):
        response = client.post(f"/api/colleges/{uuid.uuid4()}", json={"name": "X"})
        assert response.status_code == 401
        college_repo.update.assert_not_awaited()

    def test_update_only_sends_given_fields(self, client, college_repo, auth_headers):
        college = make_college("Renamed")
        college_repo.update.return_value = college

        response = client.post(
            f"/api/colleges/{college.id}",
            json={"name": "Renamed", "tuitionInState": 1000},
            headers=auth_headers,
        )

        assert response.status_code == 200
        changes = college_repo.update.await_args.args[1]
        assert changes.model_dump(exclude_unset=True) == {
            "name": "Renamed",
            "tuition_in_state": 1000,
        }


class TestSimilarColleges:

    def test_unknown_target_is_404(self, client, college_repo):
        response = client.get(f"/api/colleges/{uuid.uuid4()}/similar")

        assert response.status_code == 404
        college_repo.get_similarity_candidates.assert_not_awaited()

    def test_ranked_with_scores(self, client, college_repo):
        target = make_college("Target", state="MA", jesuit=True)
        close = make_college("Close", state="MA", jesuit=True)
        far = make_college("Far", state="TX", region="South", type="Public", size="Large")
        college_repo.get_by_id.return_value = target
        college_repo.get_similarity_candidates.return_value = [far, close]

        response = client.get(f"/api/colleges/{target.id}/similar")

        assert response.status_code == 200
        body = response.json()
        assert [c["name"] for c in body] == ["Close", "Far"]
        assert body[0]["similarityScore"] == 60
        assert body[1]["similarityScore"] == 0
        college_repo.get_similarity_candidates.assert_awaited_once_with(target.id, 200)

    def test_limit_is_clamped(self, client, college_repo):
        target = make_college("Target")
        college_repo.get_by_id.return_value = target
        college_repo.get_similarity_candidates.return_value = [
            make_college(f"C{i}") for i in range(80)
        ]

        assert len(client.get(f"/api/colleges/{target.id}/similar?limit=500").json()) == 60
        assert len(client.get(f"/api/colleges/{target.id}/similar").json()) == 6
        assert len(client.get(f"/api/colleges/{target.id}/similar?limit=0").json()) == 1

    def test_candidate_failure_is_500(self, client, college_repo):
        college_repo.get_by_id.return_value = make_college()
        college_repo.get_similarity_candidates.side_effect = DatabaseError("down")

        response = client.get(f"/api/colleges/{uuid.uuid4()}/similar")

        assert response.status_code == 500


class TestCollegeLookups:

    def test_autocomplete_needs_two_characters(self, client, college_repo):
        assert client.get("/api/colleges/autocomplete?query=b").json() == []
        college_repo.autocomplete.assert_not_awaited()

    def test_autocomplete_accepts_q_alias(self, client, college_repo):
        match = make_college("Boston College")
        college_repo.autocomplete.return_value = [match]

        response = client.get("/api/colleges/autocomplete?q=bos")

        assert response.json() == [{"id": str(match.id), "name": "Boston College"}]
        college_repo.autocomplete.assert_awaited_once_with("bos", 10)

    @pytest.mark.parametrize("path,column", [
        ("states", "state"),
        ("regions", "region"),
        ("types", "type"),
    ])
    def test_filter_values(self, client, college_repo, path, column):
        college_repo.distinct_values.return_value = ["A", "B"]

        response = client.get(f"/api/colleges/filters/{path}")

        assert response.json() == ["A", "B"]
        college_repo.distinct_values.assert_awaited_once_with(column)

    def test_acceptance_range_labels(self, client):
        response = client.get("/api/colleges/filters/acceptance-ranges")

        assert response.status_code == 200
        assert len(response.json()) == 5
        assert response.json()[0] == "Highly Selective (0-15%)"


class TestSchools:

    def test_categories(self, client, school_repo):
        school_repo.distinct_categories.return_value = ["Arts", "Law"]
        assert client.get("/api/schools/categories").json() == ["Arts", "Law"]

    def test_programs_for_colleges(self, client, school_repo):
        college_id = uuid.uuid4()
        school_repo.list_for_colleges.return_value = [
            School(name="Nursing", college_id=college_id, category="Health"),
        ]

        response = client.get(f"/api/schools/programs?collegeIds={college_id}")

        assert response.json()[0]["collegeId"] == str(college_id)
        school_repo.list_for_colleges.assert_awaited_once_with([college_id])

    def test_programs_without_filter(self, client, school_repo):
        client.get("/api/schools/programs")
        school_repo.list_for_colleges.assert_awaited_once_with(None)

    def test_programs_bad_id_is_400(self, client, school_repo):
        response = client.get("/api/schools/programs?collegeIds=nope")
        assert response.status_code == 400
