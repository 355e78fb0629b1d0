"""HTTP surface: error envelope, access control and the main flows end to end."""

from app.db.mongodb import COLLECTIONS

from tests.conftest import add_certificate, add_grades, auth_headers, make_user


# ============================================================
# ERRORS & ACCESS CONTROL
# ============================================================

def test_root_and_health(client):
    assert client.get("/").json()["status"] == "Running"
    assert client.get("/health").json() == {"status": "healthy", "storage": "memory"}


def test_unknown_route(client):
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Route not found", "path": "/api/nowhere"}


def test_missing_token(client):
    response = client.get("/api/students/profile")
    assert response.status_code == 401
    assert response.json()["success"] is False


def test_invalid_token(client):
    response = client.get("/api/students/profile", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid or expired token"


def test_wrong_role(client, store):
    make_user(store, "s1", "student")
    response = client.get("/api/companies/jobs", headers=auth_headers("s1", "student"))
    assert response.status_code == 403
    assert response.json() == {"success": False, "error": "Access denied. Insufficient permissions."}


def test_suspended_user(client, store):
    make_user(store, "s1", "student", user_status="suspended")
    response = client.get("/api/students/profile", headers=auth_headers("s1", "student"))
    assert response.status_code == 403


def test_request_validation_error(client):
    response = client.post("/api/auth/register", json={
        "email": "ann@example.com",
        "password": "short",
        "name": "Ann",
        "role": "student",
    })
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"].startswith("password")


def test_not_found_error(client, store):
    make_user(store, "co1", "company")
    response = client.put("/api/companies/jobs/missing", json={"title": "x"}, headers=auth_headers("co1", "company"))
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Job not found"}


# ============================================================
# FLOWS
# ============================================================

def test_register_verify_login_profile(client):
    registered = client.post("/api/auth/register", json={
        "email": "ann@example.com",
        "password": "secret-pass",
        "name": "Ann",
        "role": "student",
        "additionalData": {"phone": "555"},
    })
    assert registered.status_code == 201
    code = registered.json()["verificationCode"]

    verified = client.post("/api/auth/verify-email", json={"email": "ann@example.com", "code": code})
    assert verified.json() == {"message": "Email verified successfully", "success": True}

    login = client.post("/api/auth/login", json={"email": "ann@example.com", "password": "secret-pass"})
    assert login.status_code == 200
    token = login.json()["token"]

    profile = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert profile.json()["user"]["isVerified"] is True
    assert profile.json()["profile"]["phone"] == "555"

    duplicate = client.post("/api/auth/register", json={
        "email": "ann@example.com",
        "password": "secret-pass",
        "name": "Ann",
        "role": "student",
    })
    assert duplicate.status_code == 400
    assert duplicate.json()["error"] == "User already exists with this email"


def test_job_flow(client, store):
    make_user(store, "co1", "company", name="Acme")
    make_user(store, "s1", "student", skills="Python, AWS")
    make_user(store, "s2", "student", skills="Python")
    company = auth_headers("co1", "company")

    posted = client.post("/api/companies/jobs", headers=company, json={
        "title": "Cloud Engineer",
        "description": "Run our cloud",
        "minGPA": "3.0",
        "requirements": {"requiredCertificates": "aws", "keywords": ["python"]},
    })
    assert posted.status_code == 201
    job_id = posted.json()["jobId"]

    for student_id, grade, gpa in (("s1", 95, 3.8), ("s2", 80, 3.2)):
        grades = client.put("/api/students/grades", headers=auth_headers(student_id, "student"), json={
            "grades": [{"subject": "Math", "grade": grade}]
        })
        assert grades.json()["gpa"] == gpa
        add_certificate(store, student_id, "AWS_Cert_2023.pdf")

    jobs = client.get("/api/students/jobs", headers=auth_headers("s1", "student")).json()
    assert [job["id"] for job in jobs["jobs"]] == [job_id]

    for student_id in ("s2", "s1"):
        applied = client.post(f"/api/students/jobs/{job_id}/apply", headers=auth_headers(student_id, "student"))
        assert applied.status_code == 201

    again = client.post(f"/api/students/jobs/{job_id}/apply", headers=auth_headers("s1", "student"))
    assert again.status_code == 400
    assert again.json()["error"] == "Already applied to this job"
    assert len(store.query(COLLECTIONS["job_applications"], jobId=job_id)) == 2

    applicants = client.get(f"/api/companies/jobs/{job_id}/applicants", headers=company).json()
    assert applicants["totalCount"] == 2
    assert [a["studentId"] for a in applicants["applicants"]] == ["s1", "s2"]
    assert [a["evaluation"]["score"] for a in applicants["applicants"]] == [4.2, 4.05]

    ids = client.get("/api/students/jobs/applications/ids", headers=auth_headers("s1", "student")).json()
    assert ids["jobIds"] == [job_id]


def test_notifications_flow(client, store):
    make_user(store, "co1", "company", name="Acme")
    make_user(store, "s1", "student", gpa=3.5)
    student = auth_headers("s1", "student")

    client.post("/api/companies/jobs", headers=auth_headers("co1", "company"), json={
        "title": "Analyst",
        "description": "Numbers",
        "minGPA": 3.0,
    })

    inbox = client.get("/api/students/notifications", headers=student).json()
    assert len(inbox["notifications"]) == 1
    notification_id = inbox["notifications"][0]["id"]

    read = client.put(f"/api/students/notifications/{notification_id}/read", headers=student)
    assert read.status_code == 200

    unread = client.get("/api/students/notifications", params={"unreadOnly": True}, headers=student).json()
    assert unread["notifications"] == []


def test_admission_flow(client, store):
    make_user(store, "i1", "institution")
    make_user(store, "i2", "institution")
    make_user(store, "s1", "student")
    store.set(COLLECTIONS["courses"], "c1", {"institutionId": "i1", "name": "Law", "status": "active"})
    store.set(COLLECTIONS["courses"], "c2", {"institutionId": "i2", "name": "Art", "status": "active"})
    add_grades(store, "s1", ("Math", 70))
    student = auth_headers("s1", "student")

    applied = client.post("/api/students/apply", headers=student, json={"applications": [
        {"institutionId": "i1", "courseId": "c1"},
        {"institutionId": "i2", "courseId": "c2"},
    ]})
    assert applied.status_code == 201
    assert applied.json()["applicationIds"] == ["s1_c1", "s1_c2"]

    first = client.put("/api/institutions/applications/s1_c1/status",
                       headers=auth_headers("i1", "institution"), json={"status": "admitted"})
    assert first.status_code == 200

    second = client.put("/api/institutions/applications/s1_c2/status",
                        headers=auth_headers("i2", "institution"), json={"status": "admitted"})
    assert second.status_code == 400
    assert second.json()["success"] is False
    assert store.get(COLLECTIONS["applications"], "s1_c2")["status"] == "pending"

    declined = client.put("/api/students/applications/s1_c1/decision", headers=student, json={"decision": "decline"})
    assert declined.json()["message"] == "Offer declined."

    retry = client.put("/api/institutions/applications/s1_c2/status",
                       headers=auth_headers("i2", "institution"), json={"status": "admitted"})
    assert retry.status_code == 200

    received = client.get("/api/institutions/applications", headers=auth_headers("i2", "institution")).json()
    assert received["applications"][0]["student"]["gpa"] == "2.80"


def test_admin_moderation(client, store):
    make_user(store, "admin", "admin")
    make_user(store, "co1", "company")
    admin = auth_headers("admin", "admin")

    stats = client.get("/api/admin/stats", headers=admin).json()["stats"]
    assert stats["totalCompanies"] == 1

    suspended = client.put("/api/admin/companies/co1/status", headers=admin, json={"status": "suspended"})
    assert suspended.status_code == 200

    response = client.get("/api/companies/profile", headers=auth_headers("co1", "company"))
    assert response.status_code == 403

    published = client.post("/api/admin/admissions/publish", headers=admin, json={"action": "open"})
    assert published.json()["message"] == "Admissions opened successfully"


def test_public_listing(client, store):
    make_user(store, "i1", "institution", name="North College")
    store.set(COLLECTIONS["courses"], "c1", {"institutionId": "i1", "name": "Law", "status": "active"})

    institutions = client.get("/api/public/institutions").json()
    assert [i["name"] for i in institutions["data"]] == ["North College"]

    courses = client.get("/api/public/institutions/i1/courses").json()
    assert courses["count"] == 1
