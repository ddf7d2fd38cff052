"""
Tests for the write-back service and calculation repositories.
"""
import pytest
import sys
from datetime import date
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from progress_recon.models import Base, ActivityCalculation, ProjectCalculation
from progress_recon.domain.entities import Activity, InputType, KPIRecord, Project
from progress_recon.domain.services import ProgressAnalyticsEngine, WriteBackService
from progress_recon.infrastructure.repositories import (
    ActivityCalculationRepository,
    ProjectCalculationRepository,
)


@pytest.fixture
def db():
    """Fresh in-memory database per test."""
    engine = create_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def activities():
    return [
        Activity(id="A1", project_code="X1", activity_name="Excavation",
                 total_units=100, total_value=50000, actual_units=20),
        Activity(project_code="X1", activity_name="Backfill", zone="Zone A",
                 total_units=10, total_value=1000, actual_units=5),
    ]


@pytest.fixture
def analytics(activities):
    projects = [Project(code="X1"), Project(code="P100", sub_code="A")]
    kpis = [
        KPIRecord(project_code="X1", input_type=InputType.PLANNED, planned_value=51000),
        KPIRecord(project_code="X1", activity_name="Excavation", input_type=InputType.ACTUAL, quantity=20),
    ]
    return ProgressAnalyticsEngine().compute_all(projects, activities, kpis, as_of=date(2024, 6, 30))


class TestWriteBack:
    """Tests for WriteBackService.write_back."""

    def test_writes_activities_and_projects(self, db, activities, analytics):
        result = WriteBackService(db).write_back(activities, analytics)

        assert result.success
        assert result.updated_activities == 2
        assert result.updated_projects == 2

        excavation = db.query(ActivityCalculation).filter_by(activity_key="A1").one()
        assert excavation.rate == 500.0
        assert excavation.earned_value == 10000.0
        assert excavation.progress == 20.0

        backfill = db.query(ActivityCalculation).filter_by(activity_key="X1|Backfill|Zone A").one()
        assert backfill.zone == "Zone A"
        assert backfill.activity_id is None

        x1 = db.query(ProjectCalculation).filter_by(project_full_code="X1").one()
        assert x1.planned_value == 51000
        assert x1.earned_value == 10000
        assert x1.project_status == "delayed"

    def test_rerun_overwrites(self, db, activities, analytics):
        service = WriteBackService(db)
        service.write_back(activities, analytics)
        service.write_back(activities, analytics)

        assert db.query(ActivityCalculation).count() == 2
        assert db.query(ProjectCalculation).count() == 2

    def test_bad_activity_does_not_stop_batch(self, db, activities, analytics):
        nameless = Activity(project_code="X1")
        result = WriteBackService(db).write_back([nameless] + activities, analytics)

        assert not result.success
        assert result.updated_activities == 2
        assert result.updated_projects == 2
        assert len(result.errors) == 1
        assert result.errors[0].code == "WRITE_BACK_ERROR"
        assert "neither an id nor a name" in result.errors[0].reason

    def test_database_error_is_collected(self, db, activities, analytics, monkeypatch):
        service = WriteBackService(db)

        def failing_upsert(item):
            raise OperationalError("UPDATE project_calculations", {}, Exception("disk I/O error"))

        monkeypatch.setattr(service.project_repo, "upsert", failing_upsert)
        result = service.write_back(activities, analytics)

        assert result.updated_activities == 2
        assert result.updated_projects == 0
        assert [e.record_key for e in result.errors] == ["X1", "P100-A"]
        assert db.query(ActivityCalculation).count() == 2

    def test_failed_record_rolls_back_through_repository(self, db, activities, monkeypatch):
        service = WriteBackService(db)
        rollbacks = []
        real_rollback = service.activity_repo.rollback

        def tracking_rollback():
            rollbacks.append("activity")
            real_rollback()

        monkeypatch.setattr(service.activity_repo, "rollback", tracking_rollback)
        result = service.write_back([Activity(project_code="X1")] + activities)

        assert rollbacks == ["activity"]
        assert result.updated_activities == 2
        assert ActivityCalculationRepository(db).count() == 2

    def test_to_dict(self, db, analytics):
        result = WriteBackService(db).write_back([Activity()], analytics)
        data = result.to_dict()
        assert data['updated_projects'] == 2
        assert data['errors'][0]['record_key'] == "||"
        assert data['errors'][0]['code'] == "WRITE_BACK_ERROR"


class TestRepositories:
    """Tests for the calculation repositories."""

    def test_activity_repository_exists(self, db, activities):
        WriteBackService(db).write_back(activities)
        repo = ActivityCalculationRepository(db)
        assert repo.exists(activity_key="A1")
        assert not repo.exists(activity_key="missing")
        assert repo.count() == 2

    def test_project_repository_lookup(self, db, analytics):
        WriteBackService(db).write_back(analytics=analytics)
        repo = ProjectCalculationRepository(db)
        assert repo.get_by_full_code("P100-A").risk_level == "low"
        assert repo.get_by_full_code("Z9") is None
