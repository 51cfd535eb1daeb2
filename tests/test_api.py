import pytest

from tests.conftest import auth_header, insert_user


def register(client, name, email, role="student", password="secret123"):
    response = client.post(
        "/auth/register",
        json={"name": name, "email": email, "password": password, "role": role},
    )
    assert response.status_code == 200, response.text
    return response.json()


@pytest.fixture
def teacher_client(make_client):
    client = make_client()
    register(client, "Tina Teacher", "tina@example.com", role="teacher")
    return client


@pytest.fixture
def student_client(make_client):
    client = make_client()
    register(client, "Sam Student", "sam@example.com")
    return client


@pytest.fixture
def course_with_lessons(teacher_client):
    response = teacher_client.post(
        "/courses/create",
        json={"title": "Introduction to React", "description": "Hooks", "category": "Programming"},
    )
    assert response.status_code == 200, response.text
    course_id = response.json()["course_id"]

    lesson_ids = []
    for title, duration in (("What is React?", 15), ("Props and State", 20)):
        response = teacher_client.post(
            f"/courses/{course_id}/lessons", json={"title": title, "duration": duration}
        )
        assert response.status_code == 200, response.text
        lesson_ids.append(response.json()["lesson"]["lesson_id"])
    return course_id, lesson_ids


def test_enroll_and_track_progress(student_client, course_with_lessons):
    course_id, (l1, l2) = course_with_lessons

    response = student_client.post(f"/courses/{course_id}/enroll")
    assert response.status_code == 200
    assert response.json()["already_enrolled"] is False

    toggle = f"/progress/{course_id}/lessons/{{}}/toggle"
    first = student_client.post(toggle.format(l1)).json()
    assert first["completed"] is True
    assert first["progress"] == pytest.approx(50.0)

    undone = student_client.post(toggle.format(l1)).json()
    assert undone["completed"] is False
    assert undone["progress"] == 0.0

    student_client.post(toggle.format(l1))
    done = student_client.post(toggle.format(l2)).json()
    assert done["progress"] == pytest.approx(100.0)
    assert done["completed_lessons"] == [l1, l2]

    record = student_client.get(f"/progress/{course_id}").json()["progress"]
    assert record["progress"] == pytest.approx(100.0)

    enrolled = student_client.get("/courses/enrolled").json()
    assert [c["course_id"] for c in enrolled["courses"]] == [course_id]

    dashboard = student_client.get("/dashboard").json()
    assert dashboard["enrolled_courses"] == 1
    assert dashboard["completed_lessons"] == 2
    assert dashboard["study_minutes"] == 35


def test_enroll_twice_reports_already_enrolled(student_client, course_with_lessons):
    course_id, _ = course_with_lessons
    student_client.post(f"/courses/{course_id}/enroll")

    body = student_client.post(f"/courses/{course_id}/enroll").json()

    assert body["already_enrolled"] is True
    assert body["course_updated"] is False
    assert body["user_updated"] is False


def test_enroll_missing_course(student_client):
    assert student_client.post("/courses/COURSE_MISSING/enroll").status_code == 404


def test_toggle_requires_enrollment(student_client, course_with_lessons):
    course_id, (l1, _) = course_with_lessons
    response = student_client.post(f"/progress/{course_id}/lessons/{l1}/toggle")
    assert response.status_code == 403


def test_toggle_unknown_lesson(student_client, course_with_lessons):
    course_id, _ = course_with_lessons
    student_client.post(f"/courses/{course_id}/enroll")

    response = student_client.post(f"/progress/{course_id}/lessons/LESSON_NOPE/toggle")
    assert response.status_code == 404


def test_progress_before_start_is_null(student_client, course_with_lessons):
    course_id, _ = course_with_lessons
    body = student_client.get(f"/progress/{course_id}").json()
    assert body == {"course_id": course_id, "progress": None}


def test_students_cannot_create_courses(student_client):
    response = student_client.post("/courses/create", json={"title": "Mine", "category": "Design"})
    assert response.status_code == 403


def test_only_owner_adds_lessons(make_client, course_with_lessons):
    course_id, _ = course_with_lessons
    other = make_client()
    register(other, "Olga Other", "olga@example.com", role="teacher")

    response = other.post(f"/courses/{course_id}/lessons", json={"title": "Sneaky"})
    assert response.status_code == 403


def test_admin_can_add_lessons_to_any_course(make_client, raw_db, course_with_lessons):
    course_id, _ = course_with_lessons
    admin = insert_user(raw_db, "USER_ADMIN", "Ada Admin", "admin")

    response = make_client().post(
        f"/courses/{course_id}/lessons", json={"title": "Bonus"}, headers=auth_header(admin)
    )

    assert response.status_code == 200
    assert response.json()["lesson"]["order"] == 3


def test_lessons_for_missing_course(teacher_client):
    response = teacher_client.post("/courses/COURSE_MISSING/lessons", json={"title": "Intro"})
    assert response.status_code == 404


def test_course_detail_and_listing(make_client, course_with_lessons):
    course_id, _ = course_with_lessons
    client = make_client()

    detail = client.get(f"/courses/{course_id}").json()
    assert detail["teacher_name"] == "Tina Teacher"
    assert detail["total_duration"] == 35
    assert [lesson["order"] for lesson in detail["lessons"]] == [1, 2]

    listing = client.get("/courses/list").json()
    assert listing["count"] == 1
    assert client.get("/courses/COURSE_MISSING").status_code == 404


def test_search_endpoint(make_client, course_with_lessons):
    client = make_client()
    assert client.get("/courses/search", params={"q": "react", "category": "Programming"}).json()["count"] == 1
    assert client.get("/courses/search", params={"q": "react", "category": "Design"}).json()["count"] == 0


def test_teacher_views(teacher_client, student_client, course_with_lessons):
    course_id, _ = course_with_lessons
    student_client.post(f"/courses/{course_id}/enroll")

    mine = teacher_client.get("/courses/my").json()
    assert [c["course_id"] for c in mine["courses"]] == [course_id]

    summary = teacher_client.get("/courses/my/summary").json()
    assert summary == {"course_count": 1, "total_students": 1, "total_lessons": 2}

    assert student_client.get("/courses/my").status_code == 403


def test_unauthenticated_requests(make_client):
    client = make_client()
    assert client.get("/progress").status_code == 401
    assert client.get("/auth/me").status_code == 401
    assert client.get("/auth/me", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_duplicate_registration(make_client, student_client):
    response = make_client().post(
        "/auth/register",
        json={"name": "Sam Again", "email": "sam@example.com", "password": "secret123"},
    )
    assert response.status_code == 409


def test_register_as_admin_is_rejected(make_client):
    response = make_client().post(
        "/auth/register",
        json={"name": "Eve", "email": "eve@example.com", "password": "secret123", "role": "admin"},
    )
    assert response.status_code == 422


def test_login_and_logout(make_client, student_client):
    client = make_client()
    bad = client.post("/auth/login", json={"email": "sam@example.com", "password": "nope"})
    assert bad.status_code == 401
    missing = client.post("/auth/login", json={"email": "who@example.com", "password": "secret123"})
    assert missing.status_code == 401

    good = client.post("/auth/login", json={"email": "sam@example.com", "password": "secret123"})
    assert good.status_code == 200
    assert good.json()["user"]["role"] == "student"

    me = client.get("/auth/me").json()
    assert me["email"] == "sam@example.com"
    assert "password" not in me

    client.post("/auth/logout")
    assert client.get("/auth/me").status_code == 401


def test_bearer_token(make_client, student_client):
    token = student_client.post(
        "/auth/login", json={"email": "sam@example.com", "password": "secret123"}
    ).json()["access_token"]

    response = make_client().get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["name"] == "Sam Student"


def test_update_profile(student_client):
    response = student_client.patch("/auth/me", json={"name": "Samuel"})
    assert response.status_code == 200
    assert response.json()["name"] == "Samuel"


def test_admin_endpoints(make_client, raw_db, student_client, course_with_lessons):
    course_id, _ = course_with_lessons
    admin = insert_user(raw_db, "USER_ADMIN", "Ada Admin", "admin")
    client = make_client()

    users = client.get("/admin/users", headers=auth_header(admin)).json()
    assert users["count"] == 3
    assert all("password" not in u for u in users["users"])

    # One-sided enrollment left behind by a failed user-side write
    student_id = raw_db.users.find_one({"email": "sam@example.com"})["user_id"]
    raw_db.courses.update_one({"course_id": course_id}, {"$push": {"enrolled_students": student_id}})

    repaired = client.post("/admin/enrollments/reconcile", headers=auth_header(admin)).json()
    assert repaired["users_repaired"] == 1
    assert raw_db.users.find_one({"user_id": student_id})["enrolled_courses"] == [course_id]

    assert student_client.get("/admin/users").status_code == 403
    assert student_client.post("/admin/enrollments/reconcile").status_code == 403


def test_health(make_client):
    client = make_client()
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/health/db").status_code == 200
    assert client.get("/version").json()["status"] == "stable"


def test_register_with_long_multibyte_password(make_client):
    response = make_client().post(
        "/auth/register",
        json={"name": "Zoé", "email": "zoe@example.com", "password": "é" * 40},
    )
    assert response.status_code == 422


def test_login_with_padded_email(make_client):
    register(make_client(), "Pat Padded", " pat@example.com ")

    response = make_client().post(
        "/auth/login", json={"email": " pat@example.com ", "password": "secret123"}
    )
    assert response.status_code == 200
    assert response.json()["user"]["email"] == "pat@example.com"
