"""
Project Model
"""
import enum
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Integer, String, Text, Enum as SQLEnum
from sqlalchemy.orm import relationship

from project_tracker.database import Base


class ProjectStatus(str, enum.Enum):
    PLANNED = "planned"
    ONGOING = "ongoing"
    COMPLETED = "completed"


class Project(Base):
    __tablename__ = "projects"
    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_projects_date_range"),
        CheckConstraint("progress >= 0 AND progress <= 100", name="ck_projects_progress"),
        CheckConstraint("team > 0", name="ck_projects_team"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, default="", nullable=False)
    status = Column(
        SQLEnum(ProjectStatus, values_callable=lambda e: [member.value for member in e]),
        default=ProjectStatus.PLANNED,
        nullable=False,
    )
    progress = Column(Integer, default=0, nullable=False)
    team = Column(Integer, default=1, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    tasks = relationship(
        "Task",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="Task.due_date",
    )

    def __repr__(self) -> str:
        return f"<Project id={self.id} title={self.title!r} status={self.status}>"
