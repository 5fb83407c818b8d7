import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from chronoplan.api.deps import get_db
from chronoplan.db.base import Base
from chronoplan.main import app
from chronoplan.models.classroom import Classroom
from chronoplan.models.department import Department
from chronoplan.models.faculty import Faculty
from chronoplan.models.subject import Subject
from chronoplan.services.resource_pools import ClassroomRecord, FacultyRecord, ResourceCatalog, SubjectRecord
from chronoplan.services.slot_grid import build_slot_grid


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def seeded_department(db_session):
    """One department with two subjects, two faculty and two rooms."""
    department = Department(id="dept-cse", name="Computer Science", code="CSE", working_days=["Mon", "Tue"], slot_labels=[])
    db_session.add(department)
    db_session.add_all(
        [
            Faculty(id="f1", name="Prof Ada", email="ada@example.com", department_id="dept-cse", max_weekly_hours=20),
            Faculty(id="f2", name="Prof Brian", email="brian@example.com", department_id="dept-cse", max_weekly_hours=20),
            Subject(
                id="s1",
                code="CS101",
                name="Programming",
                department_id="dept-cse",
                semester=1,
                credits=3,
                teaching_hours=3,
                max_students=40,
                faculty_id="f1",
            ),
            Subject(
                id="s2",
                code="CS102",
                name="Discrete Maths",
                department_id="dept-cse",
                semester=1,
                credits=2,
                max_students=40,
                faculty_id="f2",
            ),
            Classroom(id="r1", name="LH-101", capacity=60, department_id="dept-cse", facilities=["projector"]),
            Classroom(id="r2", name="LH-102", capacity=60, department_id=None, facilities=[]),
        ]
    )
    db_session.commit()
    return department


@pytest.fixture()
def small_catalog():
    return ResourceCatalog(
        subjects=[
            SubjectRecord(id="s1", teaching_hours=2, faculty_id="f1", max_students=30),
            SubjectRecord(id="s2", teaching_hours=2, faculty_id="f2", max_students=30),
        ],
        faculty=[FacultyRecord(id="f1"), FacultyRecord(id="f2")],
        classrooms=[ClassroomRecord(id="r1", capacity=40), ClassroomRecord(id="r2", capacity=40)],
    )


@pytest.fixture()
def two_day_grid():
    return build_slot_grid(["Mon", "Tue"], 4)
