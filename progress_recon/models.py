"""
Database models and SQLAlchemy setup for the optional write-back path.

The engine never reads these tables. They cache derived figures (activity
rates and progress, project metrics) for callers that want them persisted.
"""
from datetime import datetime
from sqlalchemy import (
    create_engine, Column, Integer, String, Float, DateTime, UniqueConstraint
)
from sqlalchemy.orm import declarative_base, sessionmaker

from progress_recon.config import get_config

DATABASE_URL = get_config().database_url
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


class ActivityCalculation(Base):
    """Derived rate and earned value for one BOQ activity."""
    __tablename__ = "activity_calculations"

    id = Column(Integer, primary_key=True, index=True)
    activity_key = Column(String(255), nullable=False, index=True)  # store id, else code|name|zone
    activity_id = Column(String(100), nullable=True)
    project_code = Column(String(100), index=True)
    activity_name = Column(String(255))
    zone = Column(String(100), nullable=True)

    rate = Column(Float, default=0.0)
    planned_units = Column(Float, default=0.0)
    planned_value = Column(Float, default=0.0)
    actual_units = Column(Float, default=0.0)
    actual_value = Column(Float, default=0.0)
    earned_value = Column(Float, default=0.0)
    progress = Column(Float, default=0.0)  # percent, 0-100

    calculated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('activity_key', name='uq_activity_calculation_key'),
    )


class ProjectCalculation(Base):
    """Derived earned-value metrics for one project."""
    __tablename__ = "project_calculations"

    id = Column(Integer, primary_key=True, index=True)
    project_full_code = Column(String(100), nullable=False, index=True)
    project_code = Column(String(100))

    total_value = Column(Float, default=0.0)
    planned_value = Column(Float, default=0.0)
    earned_value = Column(Float, default=0.0)
    variance = Column(Float, default=0.0)
    actual_progress = Column(Float, default=0.0)
    planned_progress = Column(Float, default=0.0)
    variance_percentage = Column(Float, default=0.0)

    project_status = Column(String(20))  # ahead, on_track, delayed
    project_health = Column(String(20))  # excellent, good, warning, critical
    risk_level = Column(String(20))  # low, medium, high, critical

    calculated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('project_full_code', name='uq_project_calculation_code'),
    )


def init_db():
    """Initialize the database and create all tables."""
    Base.metadata.create_all(bind=engine)


def get_db():
    """Database session dependency for FastAPI."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
