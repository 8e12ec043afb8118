"""HTTP-level tests for auth, submission, review, and public listings."""

from polylearn.middleware.auth import hash_password
from polylearn.services import upload_service

from conftest import PDF_BYTES, auth_headers, make_user


def _submit(client, user, kind="study-notes", title="DBMS Notes", **fields):
    data = {"title": title, "subject": "Databases", "department": "computer", "semester": "4"}
    data.update(fields)
    return client.post(
        f"/api/{kind}",
        data=data,
        files={"file": ("notes.pdf", PDF_BYTES, "application/pdf")},
        headers=auth_headers(user),
    )


class TestAuthEndpoints:

    def test_register_login_me(self, client):
        resp = client.post("/api/auth/register", json={
            "email": "fresh@polylearn.test",
            "password": "s3cret-pass",
            "first_name": "Fresh",
            "last_name": "Student",
        })
        assert resp.status_code == 201
        assert resp.json()["role"] == "student"
        assert resp.json()["is_admin"] is False

        resp = client.post("/api/auth/login", json={
            "email": "fresh@polylearn.test", "password": "s3cret-pass",
        })
        assert resp.status_code == 200
        token = resp.json()["access_token"]

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["email"] == "fresh@polylearn.test"

    def test_duplicate_registration_is_conflict(self, client, student):
        resp = client.post("/api/auth/register", json={
            "email": student.email, "password": "s3cret-pass",
            "first_name": "Dup", "last_name": "User",
        })
        assert resp.status_code == 409

    def test_bad_login(self, client, db):
        make_user(db, "real@polylearn.test", password_hash=hash_password("right-pass"))
        resp = client.post("/api/auth/login", json={"email": "real@polylearn.test", "password": "nope"})
        assert resp.status_code == 401

    def test_overlong_password_is_rejected(self, client):
        resp = client.post("/api/auth/register", json={
            "email": "long@polylearn.test",
            "password": "x" * 80,
            "first_name": "Long",
            "last_name": "Password",
        })
        assert resp.status_code == 400

    def test_invalid_token(self, client):
        resp = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 401


class TestSubmissionEndpoints:

    def test_submit_creates_pending(self, client, student):
        resp = _submit(client, student)
        assert resp.status_code == 201
        body = resp.json()
        assert body["status"] == "pending"
        assert body["resource_type"] == "study_note"
        assert body["user_id"] == student.id

    def test_submit_question_paper(self, client, student):
        resp = _submit(client, student, kind="question-papers", title="DBMS 2023",
                       year="2023", session="Summer", marks="70")
        assert resp.status_code == 201
        assert resp.json()["resource_type"] == "question_paper"
        assert resp.json()["marks"] == 70

    def test_submit_requires_auth(self, client):
        resp = client.post(
            "/api/study-notes",
            data={"title": "X", "subject": "Y", "department": "computer"},
            files={"file": ("notes.pdf", PDF_BYTES, "application/pdf")},
        )
        assert resp.status_code in (401, 403)

    def test_submit_missing_title(self, client, student):
        resp = _submit(client, student, title="")
        assert resp.status_code == 400

    def test_submit_without_file(self, client, student):
        resp = client.post(
            "/api/study-notes",
            data={"title": "X", "subject": "Y", "department": "computer"},
            headers=auth_headers(student),
        )
        assert resp.status_code == 400

    def test_submit_non_pdf(self, client, student):
        resp = client.post(
            "/api/study-notes",
            data={"title": "X", "subject": "Y", "department": "computer"},
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=auth_headers(student),
        )
        assert resp.status_code == 400

    def test_my_uploads(self, client, student, other_student):
        _submit(client, student, title="Mine")
        _submit(client, other_student, title="Theirs")
        resp = client.get("/api/user/uploads", headers=auth_headers(student))
        assert resp.status_code == 200
        assert [u["title"] for u in resp.json()["uploads"]] == ["Mine"]


class TestAdminEndpoints:

    def test_list_requires_admin(self, client, student):
        resp = client.get("/api/admin/uploads", headers=auth_headers(student))
        assert resp.status_code == 403

    def test_list_filters_by_status_and_includes_submitter(self, client, student, admin):
        upload_id = _submit(client, student).json()["id"]
        resp = client.get("/api/admin/uploads?status=pending", headers=auth_headers(admin))
        assert resp.status_code == 200
        uploads = resp.json()["uploads"]
        assert [u["id"] for u in uploads] == [upload_id]
        assert uploads[0]["submitter"]["email"] == student.email

        resp = client.get("/api/admin/uploads?status=approved", headers=auth_headers(admin))
        assert resp.json()["total"] == 0

    def test_list_bad_status(self, client, admin):
        resp = client.get("/api/admin/uploads?status=archived", headers=auth_headers(admin))
        assert resp.status_code == 400

    def test_approve_then_approve_again(self, client, student, admin):
        upload_id = _submit(client, student).json()["id"]
        resp = client.post(f"/api/admin/uploads/{upload_id}/approve", headers=auth_headers(admin))
        assert resp.status_code == 200
        assert resp.json()["status"] == "approved"
        assert resp.json()["approved_by"] == admin.id

        again = client.post(f"/api/admin/uploads/{upload_id}/approve", headers=auth_headers(admin))
        assert again.status_code == 409

    def test_approve_unknown(self, client, admin):
        resp = client.post("/api/admin/uploads/nope/approve", headers=auth_headers(admin))
        assert resp.status_code == 404

    def test_student_cannot_approve(self, client, student):
        upload_id = _submit(client, student).json()["id"]
        resp = client.post(f"/api/admin/uploads/{upload_id}/approve", headers=auth_headers(student))
        assert resp.status_code == 403

    def test_reject_requires_reason(self, client, student, admin):
        upload_id = _submit(client, student).json()["id"]
        no_body = client.post(f"/api/admin/uploads/{upload_id}/reject", headers=auth_headers(admin))
        assert no_body.status_code == 400
        blank = client.post(f"/api/admin/uploads/{upload_id}/reject",
                            json={"reason": " "}, headers=auth_headers(admin))
        assert blank.status_code == 400
        null = client.post(f"/api/admin/uploads/{upload_id}/reject",
                           json={"reason": None}, headers=auth_headers(admin))
        assert null.status_code == 400

    def test_reject_then_approve(self, client, student, admin):
        upload_id = _submit(client, student).json()["id"]
        resp = client.post(f"/api/admin/uploads/{upload_id}/reject",
                           json={"reason": "Low quality scan"}, headers=auth_headers(admin))
        assert resp.status_code == 200
        assert resp.json()["status"] == "rejected"
        assert resp.json()["rejection_reason"] == "Low quality scan"

        approve = client.post(f"/api/admin/uploads/{upload_id}/approve", headers=auth_headers(admin))
        assert approve.status_code == 409

    def test_delete_resource(self, client, student, admin):
        upload_id = _submit(client, student).json()["id"]
        pending_delete = client.delete(f"/api/admin/resources/{upload_id}", headers=auth_headers(admin))
        assert pending_delete.status_code == 409

        client.post(f"/api/admin/uploads/{upload_id}/approve", headers=auth_headers(admin))
        resp = client.delete(f"/api/admin/resources/{upload_id}", headers=auth_headers(admin))
        assert resp.status_code == 200
        assert resp.json()["title"] == "DBMS Notes"
        assert client.get(f"/api/study-notes/{upload_id}").status_code == 404

    def test_promote_user(self, client, superadmin, admin, student):
        refused = client.post("/api/admin/promote-user", json={"email": student.email},
                              headers=auth_headers(admin))
        assert refused.status_code == 403

        resp = client.post("/api/admin/promote-user", json={"email": student.email},
                           headers=auth_headers(superadmin))
        assert resp.status_code == 200
        assert resp.json()["role"] == "admin"
        assert resp.json()["is_admin"] is True

        missing = client.post("/api/admin/promote-user", json={"email": "ghost@polylearn.test"},
                              headers=auth_headers(superadmin))
        assert missing.status_code == 404

    def test_stats(self, client, db, student, admin):
        first = _submit(client, student, title="One").json()["id"]
        second = _submit(client, student, title="Two").json()["id"]
        _submit(client, student, title="Three")
        upload_service.approve(db, first, admin)
        upload_service.reject(db, second, admin, "Duplicate")

        resp = client.get("/api/admin/stats", headers=auth_headers(admin))
        assert resp.status_code == 200
        body = resp.json()
        assert body["users"] == 2
        assert body["uploads"] == 3
        assert body["upload_stats"] == {"pending": 1, "approved": 1, "rejected": 1}


class TestPublicEndpoints:

    def test_listing_shows_only_approved(self, client, db, student, admin):
        approved_id = _submit(client, student, title="Approved").json()["id"]
        pending_id = _submit(client, student, title="Pending").json()["id"]
        upload_service.approve(db, approved_id, admin)

        resp = client.get("/api/study-notes")
        assert resp.status_code == 200
        ids = [r["id"] for r in resp.json()["resources"]]
        assert ids == [approved_id]
        assert resp.json()["resources"][0]["file_url"] == f"/api/study-notes/{approved_id}/download"

        assert client.get("/api/question-papers").json()["total"] == 0
        assert client.get(f"/api/study-notes/{pending_id}").status_code == 404
        owner_view = client.get(f"/api/study-notes/{pending_id}", headers=auth_headers(student))
        assert owner_view.status_code == 200

    def test_search_recent_and_department(self, client, db, student, admin):
        ids = [
            _submit(client, student, kind="question-papers", title=title, year="2023",
                    department=dept).json()["id"]
            for title, dept in (("Compiler Design", "computer"), ("Surveying", "civil"))
        ]
        for upload_id in ids:
            upload_service.approve(db, upload_id, admin)

        search = client.get("/api/question-papers/search?q=compiler&year=2023")
        assert [r["title"] for r in search.json()["resources"]] == ["Compiler Design"]

        dept = client.get("/api/question-papers/department/civil")
        assert [r["title"] for r in dept.json()["resources"]] == ["Surveying"]

        recent = client.get("/api/question-papers/recent?limit=1")
        assert recent.json()["total"] == 1

    def test_download(self, client, db, student, admin):
        upload_id = _submit(client, student).json()["id"]
        assert client.get(f"/api/study-notes/{upload_id}/download").status_code == 404

        upload_service.approve(db, upload_id, admin)
        resp = client.get(f"/api/study-notes/{upload_id}/download")
        assert resp.status_code == 200
        assert resp.content == PDF_BYTES
        assert resp.headers["content-type"] == "application/pdf"

    def test_detail_hides_review_fields_from_the_public(self, client, db, student, admin):
        upload_id = _submit(client, student).json()["id"]
        upload_service.approve(db, upload_id, admin)

        public = client.get(f"/api/study-notes/{upload_id}").json()
        assert public["file_url"] == f"/api/study-notes/{upload_id}/download"
        for field in ("user_id", "approved_by", "status", "rejection_reason"):
            assert field not in public

        other = make_user(db, "bystander@polylearn.test")
        assert "approved_by" not in client.get(f"/api/study-notes/{upload_id}",
                                               headers=auth_headers(other)).json()

        owner = client.get(f"/api/study-notes/{upload_id}", headers=auth_headers(student)).json()
        assert owner["user_id"] == student.id
        reviewer = client.get(f"/api/study-notes/{upload_id}", headers=auth_headers(admin)).json()
        assert reviewer["approved_by"] == admin.id

    def test_wrong_prefix_is_not_found(self, client, db, student, admin):
        upload_id = _submit(client, student).json()["id"]
        upload_service.approve(db, upload_id, admin)
        assert client.get(f"/api/question-papers/{upload_id}").status_code == 404

    def test_departments_with_counts(self, client, db, student, admin):
        upload_id = _submit(client, student).json()["id"]
        upload_service.approve(db, upload_id, admin)

        resp = client.get("/api/departments")
        assert resp.status_code == 200
        counts = {d["id"]: d["resource_count"] for d in resp.json()}
        assert len(counts) == 7
        assert counts["computer"] == 1
        assert counts["civil"] == 0

        assert client.get("/api/departments/computer").json()["resource_count"] == 1
        assert client.get("/api/departments/nowhere").status_code == 404

    def test_create_department_requires_admin(self, client, student, admin):
        payload = {"id": "chemical", "name": "Chemical Engineering"}
        assert client.post("/api/departments", json=payload,
                           headers=auth_headers(student)).status_code == 403
        resp = client.post("/api/departments", json=payload, headers=auth_headers(admin))
        assert resp.status_code == 201
        assert resp.json()["short_name"] == "Chemical Engineering"
        again = client.post("/api/departments", json=payload, headers=auth_headers(admin))
        assert again.status_code == 409

    def test_public_stats(self, client, db, student, admin):
        upload_id = _submit(client, student, kind="question-papers").json()["id"]
        upload_service.approve(db, upload_id, admin)
        _submit(client, student)

        body = client.get("/api/stats").json()
        assert body == {
            "departments": 7,
            "question_papers": 1,
            "study_notes": 0,
            "active_students": 2,
        }

    def test_search_history(self, client, student):
        resp = client.post("/api/user/history", json={"search_query": "dbms", "semester": 4},
                           headers=auth_headers(student))
        assert resp.status_code == 201
        history = client.get("/api/user/history", headers=auth_headers(student)).json()
        assert [h["search_query"] for h in history] == ["dbms"]

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}
