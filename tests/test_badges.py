import json

import pytest
from httpx import AsyncClient
from sqlalchemy import insert

from conftest import auth
from learnhub.models import Badge, UserBadge
from learnhub.services.badge_service import badge_service
from learnhub.services.points_service import points_service


@pytest.fixture
def badges(session):
    badges = [
        Badge(name="Centurion", criteria_json=json.dumps({"type": "points", "value": 100})),
        Badge(name="Level 3", criteria_json=json.dumps({"type": "level", "value": 3})),
        Badge(name="Quiz whiz", criteria_json=json.dumps({"type": "quiz_pass_count", "value": 1})),
        Badge(name="Broken", criteria_json="not json"),
    ]
    session.add_all(badges)
    session.commit()
    return badges


def test_stats_for_new_user(session, learner):
    assert badge_service.get_stats(session, learner.id) == {
        "course_count": 0,
        "quiz_pass_count": 0,
        "quiz_perfect_count": 0,
        "total_points": 0,
        "level": 1,
    }


def test_grants_badges_once(session, learner, badges):
    points_service.award_points(session, learner.id, 150)

    first = badge_service.check_badges(session, learner.id)
    second = badge_service.check_badges(session, learner.id)

    assert [badge.name for badge in first["newly_earned"]] == ["Centurion"]
    assert first["checked_count"] == 4
    assert second["newly_earned"] == []
    assert second["checked_count"] == 3
    assert session.query(UserBadge).filter(UserBadge.user_id == learner.id).count() == 1


def test_malformed_criteria_are_skipped(session):
    assert badge_service._parse_criteria("not json") is None
    assert badge_service._parse_criteria('{"type": "unknown", "value": 1}') is None
    assert badge_service._parse_criteria('{"type": "points"}') is None
    assert badge_service._parse_criteria('{"type": "points", "value": 5}') == {"type": "points", "value": 5}


@pytest.mark.asyncio
async def test_check_endpoint(client: AsyncClient, session, learner, badges):
    points_service.award_points(session, learner.id, 320)

    response = await client.post("/api/badges/check", json={}, headers=auth(session, learner))

    assert response.status_code == 200
    body = response.json()
    assert sorted(badge["name"] for badge in body["newly_earned"]) == ["Centurion", "Level 3"]
    assert body["stats"]["total_points"] == 320


@pytest.mark.asyncio
async def test_learner_cannot_check_others(client: AsyncClient, session, learner, other_learner):
    response = await client.post(
        "/api/badges/check", json={"user_id": str(other_learner.id)}, headers=auth(session, learner)
    )

    assert response.status_code == 403


def test_badge_granted_concurrently_is_skipped(session, learner, badges, monkeypatch):
    points_service.award_points(session, learner.id, 150)
    centurion = badges[0]
    parse_criteria = badge_service._parse_criteria

    def parse_and_grant_elsewhere(raw):
        # Another check inserts the grant between the unearned query and ours
        if raw == centurion.criteria_json:
            session.execute(insert(UserBadge).values(user_id=learner.id, badge_id=centurion.id))
        return parse_criteria(raw)

    monkeypatch.setattr(badge_service, "_parse_criteria", parse_and_grant_elsewhere)

    result = badge_service.check_badges(session, learner.id)

    assert result["newly_earned"] == []
    assert session.query(UserBadge).filter(UserBadge.user_id == learner.id).count() == 1
