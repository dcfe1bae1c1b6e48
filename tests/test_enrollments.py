import pytest
from datetime import date, timedelta
from sqlalchemy import select

from secretaria.core.config import settings
from secretaria.models import Deleted, DocumentStatus, DocumentTarget, Enrollment, EnrollmentStatus, UserRole
from secretaria.services.enrollment_service import EnrollmentService

BASE = "/api/v1/enrollments"


async def stored(session, enrollment_id):
    result = await session.execute(
        select(Enrollment.status, Enrollment.current_semester, Enrollment.deleted_at)
        .where(Enrollment.id == enrollment_id)
    )
    return result.one()


@pytest.mark.asyncio
async def test_create_enrollment(client, factory, auth):
    admin = await factory.admin()
    student = await factory.student()
    course = await factory.course()

    response = await client.post(
        BASE,
        json={"student_id": student.id, "course_id": course.id, "current_semester": 1},
        headers=auth(admin),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Enrollment created successfully"
    assert body["data"]["status"] == "pending"
    assert body["data"]["enrollment_date"] == date.today().isoformat()
    assert body["data"]["current_semester"] == 1


@pytest.mark.asyncio
async def test_create_enrollment_unknown_student_or_course(client, factory, auth):
    admin = await factory.admin()
    student = await factory.student()
    course = await factory.course()

    missing_student = await client.post(
        BASE, json={"student_id": 999, "course_id": course.id}, headers=auth(admin)
    )
    missing_course = await client.post(
        BASE, json={"student_id": student.id, "course_id": 999}, headers=auth(admin)
    )

    assert missing_student.status_code == 404
    assert missing_student.json()["error"] == "Student not found with id: 999"
    assert missing_course.status_code == 404


@pytest.mark.asyncio
async def test_create_duplicate_open_enrollment(client, factory, auth):
    admin = await factory.admin()
    student = await factory.student()
    course = await factory.course()
    await factory.enrollment(student, course, status=EnrollmentStatus.ACTIVE)

    response = await client.post(
        BASE, json={"student_id": student.id, "course_id": course.id}, headers=auth(admin)
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_create_after_cancelled_enrollment_is_allowed(client, factory, auth):
    admin = await factory.admin()
    student = await factory.student()
    course = await factory.course()
    await factory.enrollment(student, course, status=EnrollmentStatus.CANCELLED)

    response = await client.post(
        BASE, json={"student_id": student.id, "course_id": course.id}, headers=auth(admin)
    )

    assert response.status_code == 201


@pytest.mark.asyncio
async def test_create_enrollment_in_the_future(client, factory, auth):
    admin = await factory.admin()
    student = await factory.student()
    course = await factory.course()
    tomorrow = (date.today() + timedelta(days=1)).isoformat()

    response = await client.post(
        BASE,
        json={"student_id": student.id, "course_id": course.id, "enrollment_date": tomorrow},
        headers=auth(admin),
    )

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "enrollment_date"


@pytest.mark.asyncio
async def test_list_enrollments_with_filters(client, factory, auth):
    admin = await factory.admin()
    course = await factory.course()
    other_course = await factory.course()
    for _ in range(3):
        await factory.enrollment(await factory.student(), course)
    await factory.enrollment(await factory.student(), course, status=EnrollmentStatus.PENDING)
    await factory.enrollment(await factory.student(), other_course)

    response = await client.get(
        BASE, params={"status": "active", "course_id": course.id, "size": 2}, headers=auth(admin)
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data["items"]) == 2
    assert data["meta"]["total"] == 3
    assert data["meta"]["total_pages"] == 2
    assert data["meta"]["has_next"] is True
    assert all(item["course"]["id"] == course.id for item in data["items"])


@pytest.mark.asyncio
async def test_list_enrollments_invalid_status_filter(client, factory, auth):
    admin = await factory.admin()

    response = await client.get(BASE, params={"status": "frozen"}, headers=auth(admin))

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_my_enrollments(client, factory, auth):
    student = await factory.student()
    user = await factory.user(UserRole.STUDENT, student=student)
    mine = await factory.enrollment(student, await factory.course())
    await factory.enrollment(await factory.student(), await factory.course())

    response = await client.get(f"{BASE}/me", headers=auth(user))

    assert response.status_code == 200
    assert [item["id"] for item in response.json()["data"]] == [mine.id]


@pytest.mark.asyncio
async def test_get_enrollment_includes_student_and_course(client, factory, auth):
    admin = await factory.admin()
    student = await factory.student(name="Ana Souza")
    course = await factory.course(name="Pedagogia")
    enrollment = await factory.enrollment(student, course)

    response = await client.get(f"{BASE}/{enrollment.id}", headers=auth(admin))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["student"]["name"] == "Ana Souza"
    assert data["course"]["name"] == "Pedagogia"


@pytest.mark.asyncio
async def test_get_missing_enrollment(client, factory, auth):
    admin = await factory.admin()

    response = await client.get(f"{BASE}/12345", headers=auth(admin))

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Enrollment not found with id: 12345"}


@pytest.mark.asyncio
@pytest.mark.parametrize("initial", [
    EnrollmentStatus.PENDING,
    EnrollmentStatus.CANCELLED,
    EnrollmentStatus.REENROLLMENT,
])
async def test_admin_activation_is_unconditional(session, client, factory, auth, initial):
    admin = await factory.admin()
    enrollment = await factory.enrollment(await factory.student(), await factory.course(), status=initial)

    response = await client.put(
        f"{BASE}/{enrollment.id}/status", json={"status": "active"}, headers=auth(admin)
    )

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "active"
    assert (await stored(session, enrollment.id)).status == EnrollmentStatus.ACTIVE


@pytest.mark.asyncio
async def test_reopening_cancelled_enrollment_conflicts_with_open_one(session, client, factory, auth):
    admin = await factory.admin()
    student = await factory.student()
    course = await factory.course()
    old = await factory.enrollment(student, course, status=EnrollmentStatus.CANCELLED)
    current = await factory.enrollment(student, course, status=EnrollmentStatus.ACTIVE)

    response = await client.put(f"{BASE}/{old.id}/status", json={"status": "active"}, headers=auth(admin))

    assert response.status_code == 409
    body = response.json()
    assert body["success"] is False
    assert "active" in body["error"]
    assert (await stored(session, old.id)).status == EnrollmentStatus.CANCELLED
    assert (await stored(session, current.id)).status == EnrollmentStatus.ACTIVE


@pytest.mark.asyncio
async def test_reopening_race_on_unique_index_is_a_conflict(session, client, factory, auth, monkeypatch):
    async def no_open_enrollment(*args, **kwargs):
        return None

    admin = await factory.admin()
    student = await factory.student()
    course = await factory.course()
    old_id = (await factory.enrollment(student, course, status=EnrollmentStatus.CANCELLED)).id
    await factory.enrollment(student, course, status=EnrollmentStatus.PENDING)
    headers = auth(admin)
    # Another request opened an enrollment between the check and the commit
    monkeypatch.setattr(EnrollmentService, "get_open_enrollment", no_open_enrollment)

    response = await client.put(f"{BASE}/{old_id}/status", json={"status": "active"}, headers=headers)

    assert response.status_code == 409
    assert response.json() == {
        "success": False,
        "error": "Student already has an open enrollment in this course",
    }
    assert (await stored(session, old_id)).status == EnrollmentStatus.CANCELLED


@pytest.mark.asyncio
async def test_activation_requires_documents_when_enabled(session, client, factory, auth, monkeypatch):
    monkeypatch.setattr(settings, "require_document_approval_for_activation", True)
    admin = await factory.admin()
    student = await factory.student()
    enrollment = await factory.enrollment(student, await factory.course(), status=EnrollmentStatus.PENDING)
    rg = await factory.document_type("RG")
    diploma = await factory.document_type("Diploma", user_type=DocumentTarget.BOTH)
    await factory.document_type("Teaching license", user_type=DocumentTarget.TEACHER)
    await factory.document(student, rg, DocumentStatus.APPROVED)
    await factory.document(student, diploma, DocumentStatus.PENDING)

    rejected = await client.put(
        f"{BASE}/{enrollment.id}/status", json={"status": "active"}, headers=auth(admin)
    )
    assert rejected.status_code == 422
    assert (await stored(session, enrollment.id)).status == EnrollmentStatus.PENDING

    await factory.document(student, diploma, DocumentStatus.APPROVED)
    accepted = await client.put(
        f"{BASE}/{enrollment.id}/status", json={"status": "active"}, headers=auth(admin)
    )
    assert accepted.status_code == 200


@pytest.mark.asyncio
async def test_status_update_follows_transitions(client, factory, auth):
    admin = await factory.admin()
    enrollment = await factory.enrollment(
        await factory.student(), await factory.course(), status=EnrollmentStatus.COMPLETED
    )

    response = await client.put(
        f"{BASE}/{enrollment.id}/status", json={"status": "pending"}, headers=auth(admin)
    )

    assert response.status_code == 422
    assert "completed" in response.json()["error"]


@pytest.mark.asyncio
async def test_status_update_rejects_unknown_status(client, factory, auth):
    admin = await factory.admin()
    enrollment = await factory.enrollment(await factory.student(), await factory.course())

    response = await client.put(
        f"{BASE}/{enrollment.id}/status", json={"status": "archived"}, headers=auth(admin)
    )

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "status"


@pytest.mark.asyncio
async def test_update_current_semester(session, client, factory, auth):
    admin = await factory.admin()
    enrollment = await factory.enrollment(await factory.student(), await factory.course())

    ok = await client.put(
        f"{BASE}/{enrollment.id}/current-semester", json={"current_semester": 0}, headers=auth(admin)
    )
    too_high = await client.put(
        f"{BASE}/{enrollment.id}/current-semester", json={"current_semester": 13}, headers=auth(admin)
    )

    assert ok.status_code == 200
    assert too_high.status_code == 400
    assert (await stored(session, enrollment.id)).current_semester == 0


@pytest.mark.asyncio
async def test_delete_enrollment_cancels_and_hides_it(session, client, factory, auth):
    admin = await factory.admin()
    enrollment = await factory.enrollment(await factory.student(), await factory.course())

    response = await client.delete(f"{BASE}/{enrollment.id}", headers=auth(admin))

    assert response.status_code == 200
    row = await stored(session, enrollment.id)
    assert row.status == EnrollmentStatus.CANCELLED
    assert row.deleted_at is not None

    again = await client.get(f"{BASE}/{enrollment.id}", headers=auth(admin))
    assert again.status_code == 404

    result = await session.execute(
        select(Enrollment).where(Enrollment.id == enrollment.id).execution_options(populate_existing=True)
    )
    assert isinstance(result.scalar_one().lifecycle, Deleted)


@pytest.mark.asyncio
async def test_pending_documents_report(client, factory, auth):
    admin = await factory.admin()
    student = await factory.student()
    enrollment = await factory.enrollment(student, await factory.course())
    rg = await factory.document_type("RG")
    await factory.document_type("Proof of address")
    await factory.document_type("Photo", is_required=False)
    await factory.document(student, rg, DocumentStatus.APPROVED)

    response = await client.get(f"{BASE}/{enrollment.id}/pending-documents", headers=auth(admin))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["all_approved"] is False
    report = {d["document_type_name"]: d for d in data["documents"]}
    assert set(report) == {"RG", "Proof of address"}
    assert report["RG"]["is_approved"] is True
    assert report["Proof of address"]["status"] == "not_submitted"


@pytest.mark.asyncio
@pytest.mark.parametrize("method, path", [
    ("get", BASE),
    ("get", f"{BASE}/1"),
    ("put", f"{BASE}/1/current-semester"),
    ("delete", f"{BASE}/1"),
])
async def test_management_endpoints_are_admin_only(client, factory, auth, method, path):
    teacher = await factory.user(UserRole.TEACHER)

    response = await client.request(method.upper(), path, json={"current_semester": 1}, headers=auth(teacher))

    assert response.status_code == 403
    assert response.json()["error"] == "You do not have permission to access this resource"


@pytest.mark.asyncio
async def test_my_enrollments_is_student_only(client, factory, auth):
    admin = await factory.admin()

    response = await client.get(f"{BASE}/me", headers=auth(admin))

    assert response.status_code == 403
