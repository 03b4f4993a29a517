import uuid

import pytest
from httpx import AsyncClient

from conftest import auth
from learnhub.models import Course, Enrollment, QuizAttempt, UnitProgress
from learnhub.models.enums import CourseStatus


@pytest.mark.asyncio
async def test_learner_enrolls_in_published_course(client: AsyncClient, session, learner, course):
    response = await client.post(
        "/api/enrollments", json={"course_id": str(course.id)}, headers=auth(session, learner)
    )

    assert response.status_code == 201
    body = response.json()
    assert body["user_id"] == str(learner.id)
    assert body["status"] == "not_started"
    assert body["progress_pct"] == 0


@pytest.mark.asyncio
async def test_duplicate_enrollment_conflicts(client: AsyncClient, session, learner, course, enrollment):
    response = await client.post(
        "/api/enrollments", json={"course_id": str(course.id)}, headers=auth(session, learner)
    )

    assert response.status_code == 409
    assert response.json()["error"] == "already_enrolled"
    assert response.json()["enrollment_id"] == str(enrollment.id)


@pytest.mark.asyncio
async def test_learner_cannot_enroll_in_draft_course(client: AsyncClient, session, learner):
    draft = Course(name="Draft", status=CourseStatus.DRAFT.value)
    session.add(draft)
    session.commit()

    response = await client.post(
        "/api/enrollments", json={"course_id": str(draft.id)}, headers=auth(session, learner)
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_learner_cannot_enroll_someone_else(client: AsyncClient, session, learner, other_learner, course):
    response = await client.post(
        "/api/enrollments",
        json={"course_id": str(course.id), "user_id": str(other_learner.id)},
        headers=auth(session, learner),
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_instructor_enrolls_learner(client: AsyncClient, session, instructor, learner, course):
    response = await client.post(
        "/api/enrollments",
        json={"course_id": str(course.id), "user_id": str(learner.id)},
        headers=auth(session, instructor),
    )

    assert response.status_code == 201
    assert response.json()["user_id"] == str(learner.id)


@pytest.mark.asyncio
async def test_enroll_unknown_course(client: AsyncClient, session, learner):
    response = await client.post(
        "/api/enrollments", json={"course_id": str(uuid.uuid4())}, headers=auth(session, learner)
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_record_progress_and_read_back(client: AsyncClient, session, learner, enrollment, units):
    headers = auth(session, learner)

    response = await client.post(
        f"/api/enrollments/{enrollment.id}/progress",
        json={"unit_id": str(units[0].id), "status": "completed", "time_spent_sec": 120},
        headers=headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["unit_progress"]["status"] == "completed"
    assert body["unit_progress"]["time_spent_sec"] == 120
    assert body["unit_progress"]["completed_at"] is not None
    assert body["enrollment"]["progress_pct"] == 25
    assert body["enrollment"]["status"] == "in_progress"

    detail = await client.get(f"/api/enrollments/{enrollment.id}", headers=headers)

    assert detail.status_code == 200
    assert detail.json()["enrollment"]["id"] == str(enrollment.id)
    assert len(detail.json()["unit_progress"]) == 1


@pytest.mark.asyncio
async def test_completing_all_units_completes_enrollment(client: AsyncClient, session, learner, enrollment, units):
    headers = auth(session, learner)

    for unit in units:
        response = await client.post(
            f"/api/enrollments/{enrollment.id}/progress",
            json={"unit_id": str(unit.id), "status": "completed"},
            headers=headers,
        )

    body = response.json()["enrollment"]
    assert body["progress_pct"] == 100
    assert body["status"] == "completed"
    assert body["completed_at"] is not None


@pytest.mark.asyncio
async def test_progress_rejects_bad_score(client: AsyncClient, session, learner, enrollment, units):
    response = await client.post(
        f"/api/enrollments/{enrollment.id}/progress",
        json={"unit_id": str(units[0].id), "score": 140},
        headers=auth(session, learner),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


@pytest.mark.asyncio
async def test_progress_rejects_unit_outside_course(client: AsyncClient, session, learner, enrollment):
    response = await client.post(
        f"/api/enrollments/{enrollment.id}/progress",
        json={"unit_id": str(uuid.uuid4()), "status": "completed"},
        headers=auth(session, learner),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "unit_not_in_course"


@pytest.mark.asyncio
async def test_other_learner_cannot_read_enrollment(client: AsyncClient, session, other_learner, enrollment):
    response = await client.get(f"/api/enrollments/{enrollment.id}", headers=auth(session, other_learner))

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_unenroll_removes_progress_and_attempts(
    client: AsyncClient, session, learner, enrollment, units, quiz_unit
):
    headers = auth(session, learner)
    await client.post(
        f"/api/enrollments/{enrollment.id}/progress",
        json={"unit_id": str(units[0].id), "status": "completed"},
        headers=headers,
    )
    await client.post("/api/quiz-attempts", json={"unit_id": str(quiz_unit.id)}, headers=headers)
    enrollment_id = enrollment.id

    response = await client.delete(f"/api/enrollments/{enrollment_id}", headers=headers)

    assert response.status_code == 204
    session.expire_all()
    assert session.get(Enrollment, enrollment_id) is None
    assert session.query(UnitProgress).count() == 0
    assert session.query(QuizAttempt).count() == 0
