"""
Integration tests for admin and import job endpoints
"""
import pytest
from knowledge_base.models.user import User


@pytest.mark.integration
class TestImportJobs:
    """Test import job polling"""

    def test_list_newest_first(self, client, admin_headers, admin_user, make_import_job):
        first = make_import_job(admin_user, file_name="first.csv", status="completed",
                                stats={"total": 3, "success": 2, "failed": 1},
                                errors=[{"row": 2, "message": "Missing title"}])
        second = make_import_job(admin_user, file_name="second.csv")

        response = client.get("/api/import/jobs", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert [job["id"] for job in data["data"]] == [second.id, first.id]
        assert data["data"][1]["stats"] == {"total": 3, "success": 2, "failed": 1}
        assert data["data"][1]["errors"] == [{"row": 2, "message": "Missing title"}]

    def test_status_filter(self, client, admin_headers, admin_user, make_import_job):
        make_import_job(admin_user, status="failed")
        make_import_job(admin_user, status="processing")

        data = client.get("/api/import/jobs", params={"status": "failed"}, headers=admin_headers).json()

        assert [job["status"] for job in data["data"]] == ["failed"]

    def test_invalid_status(self, client, admin_headers):
        response = client.get("/api/import/jobs", params={"status": "unknown"}, headers=admin_headers)

        assert response.status_code == 400

    def test_pagination(self, client, admin_headers, admin_user, make_import_job):
        for index in range(3):
            make_import_job(admin_user, file_name=f"{index}.csv")

        data = client.get("/api/import/jobs", params={"limit": 1, "offset": 1}, headers=admin_headers).json()

        assert len(data["data"]) == 1
        assert data["count"] == 3

    def test_detail(self, client, admin_headers, admin_user, make_import_job):
        job = make_import_job(admin_user, status="processing")

        response = client.get(f"/api/import/jobs/{job.id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "processing"

    def test_detail_not_found(self, client, admin_headers):
        assert client.get("/api/import/jobs/999", headers=admin_headers).status_code == 404

    def test_members_forbidden(self, client, member_headers):
        assert client.get("/api/import/jobs", headers=member_headers).status_code == 403


@pytest.mark.integration
class TestCleanup:
    """Test bulk content cleanup"""

    def test_delete_articles_only(self, client, admin_headers, make_category, make_article, member_user):
        guides = make_category("Guides")
        make_article("One", member_user, categories=[guides])
        make_article("Two", member_user)

        response = client.post("/api/admin/cleanup", json={}, headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["deleted"]["articles"] == 2
        assert data["deleted"]["article_categories"] == 1
        assert data["remaining"] == {"articles": 0, "categories": 1}

    def test_delete_categories_too(self, client, admin_headers, make_category):
        root = make_category("Root")
        child = make_category("Child", parent=root)
        make_category("Grandchild", parent=child)

        response = client.post("/api/admin/cleanup", json={"delete_categories": True}, headers=admin_headers)

        data = response.json()
        assert data["deleted"]["categories"] == 3
        assert data["remaining"] == {"articles": 0, "categories": 0}

    def test_members_forbidden(self, client, member_headers):
        assert client.post("/api/admin/cleanup", json={}, headers=member_headers).status_code == 403


@pytest.mark.integration
class TestRoles:
    """Test role management"""

    def test_promote_member(self, client, admin_headers, member_user, db_session):
        response = client.patch(
            "/api/admin/users/role",
            json={"user_id": member_user.id, "role": "admin"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["role"] == "admin"
        db_session.expire_all()
        assert db_session.get(User, member_user.id).role == "admin"

    def test_cannot_change_own_role(self, client, admin_headers, admin_user):
        response = client.patch(
            "/api/admin/users/role",
            json={"user_id": admin_user.id, "role": "member"},
            headers=admin_headers,
        )

        assert response.status_code == 400

    def test_invalid_role(self, client, admin_headers, member_user):
        response = client.patch(
            "/api/admin/users/role",
            json={"user_id": member_user.id, "role": "owner"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert "role" in response.json()["detail"]["errors"]

    def test_unknown_user(self, client, admin_headers):
        response = client.patch("/api/admin/users/role", json={"user_id": 999, "role": "admin"}, headers=admin_headers)

        assert response.status_code == 404

    def test_list_users(self, client, admin_headers, member_user):
        response = client.get("/api/admin/users", headers=admin_headers)

        assert response.status_code == 200
        assert {u["email"] for u in response.json()} == {"admin@inbound.no", "member@inbound.no"}
