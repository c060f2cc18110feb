from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import project_tracker.schemas as schemas
from project_tracker.database import Database
from project_tracker.main import create_app
from project_tracker.services import TrackerService

TEST_DATABASE_URL = "sqlite://"
FIXED_NOW = datetime(2024, 1, 15, 9, 30)


class FrozenClock:
    """Callable clock that tests can move around."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def database() -> Database:
    db = Database(TEST_DATABASE_URL).open()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def db_session(database: Database) -> Session:
    with database.session_scope() as session:
        yield session


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def service(db_session: Session, clock: FrozenClock) -> TrackerService:
    return TrackerService.for_session(db_session, clock=clock)


@pytest.fixture
def client(clock: FrozenClock) -> TestClient:
    app = create_app(database=Database(TEST_DATABASE_URL), clock=clock)
    with TestClient(app) as test_client:
        yield test_client


def make_project(
    service: TrackerService,
    title: str = "Website relaunch",
    start_date: date = date(2024, 1, 1),
    end_date: date = date(2024, 1, 31),
    team: int = 3,
):
    return service.create_project(
        schemas.ProjectCreate(
            title=title,
            description="",
            team=team,
            start_date=start_date,
            end_date=end_date,
        )
    )


def make_task(service: TrackerService, project, title: str = "Draft copy", due_date: date = date(2024, 1, 15)):
    return service.create_task(schemas.TaskCreate(project_id=project.id, title=title, due_date=due_date))
