"""API tests using an in-process ASGI client and an in-memory database."""
import pytest

from scholarmatch.config import settings

pytestmark = pytest.mark.asyncio

STUDENT = {
    "firstName": "Ana",
    "lastName": "Lopez",
    "email": "ana@example.com",
    "profile": {
        "gpa": 3.8,
        "intendedMajor": "Biology",
        "state": "CA",
        "financialNeed": "HIGH",
        "volunteerHours": 80,
    },
}


async def create_scholarship(client, name, award, criteria=None):
    response = await client.post(
        "/scholarships",
        json={"name": name, "provider": "Acme", "awardAmount": award, "eligibilityCriteria": criteria or {}},
    )
    assert response.status_code == 201
    return response.json()


class TestHealth:
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": settings.version}

    async def test_root_lists_endpoints(self, client):
        response = await client.get("/")
        assert response.status_code == 200
        assert "check_eligibility" in response.json()["endpoints"]


class TestEligibilityEndpoints:
    """Stateless eligibility endpoints."""

    async def test_check_reports_first_failure(self, client):
        response = await client.post(
            "/eligibility/check",
            json={
                "profile": {"gpa": 3.2},
                "criteria": {"academic": {"minGPA": 3.5, "minSAT": 1400}},
            },
        )
        assert response.status_code == 200
        assert response.json() == {
            "eligible": False,
            "failedCriteria": [
                {"dimension": "academic", "criterion": "minGPA", "required": 3.5, "actual": 3.2},
            ],
        }

    async def test_check_exhaustive(self, client):
        response = await client.post(
            "/eligibility/check",
            json={
                "profile": {"gpa": 3.2},
                "criteria": {"academic": {"minGPA": 3.5, "minSAT": 1400}},
                "options": {"earlyExit": False},
            },
        )
        assert [f["criterion"] for f in response.json()["failedCriteria"]] == ["minGPA", "minSAT"]

    async def test_check_with_disabled_dimension(self, client):
        response = await client.post(
            "/eligibility/check",
            json={
                "profile": {"gpa": 3.2},
                "criteria": {"academic": {"minGPA": 3.5}},
                "options": {"enabledDimensions": {"academic": False}},
            },
        )
        assert response.json()["eligible"] is True

    async def test_filter_with_statistics(self, client):
        response = await client.post(
            "/eligibility/filter",
            json={
                "profile": {"gpa": 3.6, "state": "CA"},
                "scholarships": [
                    {"id": 1, "eligibilityCriteria": {}},
                    {"id": 2, "eligibilityCriteria": {"academic": {"minGPA": 3.8}}},
                    {"id": 3, "eligibilityCriteria": {"demographic": {"requiredState": ["ca"]}}},
                    {"id": 4, "eligibilityCriteria": {"demographic": {"requiredState": ["NY"]}}},
                ],
                "includeStatistics": True,
            },
        )
        assert response.status_code == 200
        body = response.json()
        assert body["eligibleIds"] == [1, 3]
        stats = body["statistics"]
        assert stats["totalScholarships"] == 4
        assert stats["eligibleCount"] == 2
        assert stats["rejectedCount"] == 2
        assert stats["rejectionsByDimension"]["academic"] == 1
        assert stats["rejectionsByDimension"]["demographic"] == 1

    async def test_filter_without_statistics(self, client):
        response = await client.post(
            "/eligibility/filter",
            json={"profile": {}, "scholarships": [{"id": "a", "eligibilityCriteria": {}}]},
        )
        assert response.json() == {"eligibleIds": ["a"], "statistics": None}

    async def test_compare(self, client):
        response = await client.post(
            "/eligibility/compare",
            json={
                "profile": {"gpa": 3.8, "volunteerHours": 80},
                "criteria": {
                    "academic": {"minGPA": 3.5},
                    "experience": {"minVolunteerHours": 100},
                    "special": {"firstGenerationRequired": True},
                },
            },
        )
        assert response.status_code == 200
        body = response.json()
        assert [c["status"] for c in body["comparisons"]] == ["met", "partially_met", "not_met"]
        assert body["comparisons"][1]["partialPercentage"] == 80.0
        assert (body["metCount"], body["totalCount"]) == (1, 3)

    async def test_invalid_payload(self, client):
        response = await client.post("/eligibility/check", json={"criteria": {}})
        assert response.status_code == 422


class TestStudentsAndScholarships:
    async def test_create_student(self, client):
        response = await client.post("/students", json=STUDENT)
        assert response.status_code == 201
        body = response.json()
        assert body["firstName"] == "Ana"
        assert body["email"] == "ana@example.com"

    async def test_duplicate_student(self, client):
        await client.post("/students", json=STUDENT)
        response = await client.post("/students", json=STUDENT)
        assert response.status_code == 400
        assert response.json()["error"] == "ingest_error"

    async def test_create_then_update_scholarship(self, client):
        created = await create_scholarship(client, "Merit", 1000)
        assert created["created"] is True

        updated = await create_scholarship(client, "Merit", 2000)
        assert updated["created"] is False
        assert updated["id"] == created["id"]

    async def test_invalid_scholarship(self, client):
        response = await client.post("/scholarships", json={"name": "No provider", "awardAmount": 10})
        assert response.status_code == 400
        assert response.json()["error"] == "ingest_error"

    @pytest.mark.parametrize("criteria", ["foo", [1, 2], 3])
    async def test_non_object_criteria_rejected(self, client, criteria):
        response = await client.post(
            "/scholarships",
            json={"name": "Odd", "provider": "Acme", "awardAmount": 10, "eligibilityCriteria": criteria},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "ingest_error"

    async def test_import_catalog(self, client):
        content = b"name,provider,awardAmount,minGPA\nAlpha,Fund,1000,3.0\nBeta,Fund,2000,\n"
        response = await client.post(
            "/scholarships/import",
            files={"file": ("catalog.csv", content, "text/csv")},
        )
        assert response.status_code == 200
        assert response.json() == {"total": 2, "created": 2, "updated": 0, "failed": 0, "errors": []}

    async def test_import_unsupported_file(self, client):
        response = await client.post(
            "/scholarships/import",
            files={"file": ("catalog.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "parse_error"


class TestMatchingEndpoints:
    async def test_match_and_fetch(self, client):
        student_id = (await client.post("/students", json=STUDENT)).json()["id"]
        await create_scholarship(client, "Biology Award", 5000, {"majorField": {"eligibleMajors": ["Biology"]}})
        await create_scholarship(client, "Engineering Award", 9000, {"majorField": {"eligibleMajors": ["Engineering"]}})
        await create_scholarship(client, "Open Award", 1000)

        response = await client.post(f"/students/{student_id}/match", json={"topN": 10, "asOf": "2025-01-15"})
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["totalScholarships"] == 3
        assert body["eligibleCount"] == 2
        assert [m["rank"] for m in body["matches"]] == [1, 2]
        first = body["matches"][0]
        assert first["overallMatchScore"] == 100
        assert set(first["dimensionScores"]) == {
            "academic", "demographic", "major_field", "experience", "financial", "special",
        }
        assert first["applicationEffort"] == "LOW"

        response = await client.get(f"/students/{student_id}/matches")
        assert response.status_code == 200
        stored = response.json()
        assert stored["isStale"] is False
        assert [m["scholarshipId"] for m in stored["matches"]] == [m["scholarshipId"] for m in body["matches"]]

    async def test_match_without_body(self, client):
        student_id = (await client.post("/students", json=STUDENT)).json()["id"]
        response = await client.post(f"/students/{student_id}/match")
        assert response.status_code == 200
        assert response.json()["matches"] == []

    async def test_match_unknown_student(self, client):
        response = await client.post("/students/999/match", json={})
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    async def test_matches_before_matching(self, client):
        response = await client.get("/students/1/matches")
        assert response.status_code == 404
