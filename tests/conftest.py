import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = "redis://127.0.0.1:1/0"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["GEMINI_API_KEY"] = ""

import json

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from learnhub.database import Base, get_db
from learnhub.main import app
from learnhub.models import Course, Question, Unit, User
from learnhub.models.enums import CourseStatus, QuestionType, UnitType, UserRole
from learnhub.services.session_service import session_service

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# pysqlite needs explicit BEGIN for SAVEPOINT to nest properly
@event.listens_for(engine, "connect")
def _disable_pysqlite_transactions(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _emit_begin(conn):
    conn.exec_driver_sql("BEGIN")


TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture(name="session")
def session_fixture():
    Base.metadata.create_all(engine)
    session = TestingSession()
    yield session
    session.close()
    Base.metadata.drop_all(engine)


@pytest.fixture(name="client")
def client_fixture(session):
    def get_db_override():
        yield session

    app.dependency_overrides[get_db] = get_db_override
    client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
    yield client
    app.dependency_overrides.clear()


def make_user(session, name, role=UserRole.LEARNER.value):
    user = User(email=f"{name.lower()}@example.com", name=name, role=role)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def learner(session):
    return make_user(session, "Learner")


@pytest.fixture
def other_learner(session):
    return make_user(session, "Other")


@pytest.fixture
def instructor(session):
    return make_user(session, "Instructor", UserRole.INSTRUCTOR.value)


@pytest.fixture
def admin(session):
    return make_user(session, "Admin", UserRole.ADMIN.value)


def auth(session, user):
    """Authorization header carrying a fresh session token for user"""
    return {"Authorization": f"Bearer {session_service.create_session(session, user.id)}"}


@pytest.fixture
def course(session):
    """Published course: three content units and a two-question quiz (max one retry)"""
    course = Course(name="Geography 101", status=CourseStatus.PUBLISHED.value)
    session.add(course)
    session.flush()

    units = [
        Unit(course_id=course.id, type=UnitType.TEXT.value, name="Capitals",
             content="Capital cities are the seat of government. " * 3, sort_order=0),
        Unit(course_id=course.id, type=UnitType.VIDEO.value, name="Rivers", sort_order=1),
        Unit(course_id=course.id, type=UnitType.TEXT.value, name="Mountains",
             content="Mountains form where tectonic plates collide.", sort_order=2),
        Unit(course_id=course.id, type=UnitType.QUIZ.value, name="Final quiz", sort_order=3,
             settings_json=json.dumps({"max_retries": 1, "pass_threshold": 70})),
    ]
    session.add_all(units)
    session.flush()

    quiz = units[3]
    session.add_all([
        Question(course_id=course.id, unit_id=quiz.id, type=QuestionType.MULTIPLE_CHOICE.value,
                 question_text="Capital of France?", options=["Paris", "Rome", "Oslo", "Bern"],
                 correct_answer="Paris", points=1, sort_order=0),
        Question(course_id=course.id, unit_id=quiz.id, type=QuestionType.TRUE_FALSE.value,
                 question_text="Everest is the tallest mountain.", correct_answer="True",
                 points=1, sort_order=1),
    ])
    session.commit()
    session.refresh(course)
    return course


@pytest.fixture
def units(course):
    return list(course.units)


@pytest.fixture
def quiz_unit(units):
    return units[3]


@pytest.fixture
def questions(session, quiz_unit):
    return (
        session.query(Question)
        .filter(Question.unit_id == quiz_unit.id)
        .order_by(Question.sort_order)
        .all()
    )


@pytest.fixture
def enrollment(session, learner, course):
    from learnhub.services.enrollment_service import enrollment_service

    return enrollment_service.enroll(session, learner, course.id)
