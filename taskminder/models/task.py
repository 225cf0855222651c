"""Task model"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship, validates
from taskminder.core.database import Base
from taskminder.core.clock import utcnow

TASK_STATUSES = ("pending", "in-progress", "completed", "archived")
ACTIVE_STATUSES = ("pending", "in-progress")
TASK_PRIORITIES = ("low", "medium", "high")


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    due_date = Column(DateTime, nullable=True, index=True)
    priority = Column(String, default="medium", nullable=False)
    status = Column(String, default="pending", nullable=False, index=True)

    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    reminders = relationship(
        "TaskReminder",
        order_by="TaskReminder.position",
        cascade="all, delete-orphan",
        back_populates="task",
    )

    @validates("status")
    def validate_status(self, key, value):
        if value not in TASK_STATUSES:
            raise ValueError(f"Invalid task status: {value}")
        if value == "completed" and self.completed_at is None:
            self.completed_at = utcnow()
        return value

    @validates("priority")
    def validate_priority(self, key, value):
        if value not in TASK_PRIORITIES:
            raise ValueError(f"Invalid task priority: {value}")
        return value

    def add_reminder(self, time):
        reminder = TaskReminder(time=time, sent=False, position=len(self.reminders))
        self.reminders.append(reminder)
        return reminder


class TaskReminder(Base):
    """Une alerte programmée, indépendante de l'échéance"""
    __tablename__ = "task_reminders"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    time = Column(DateTime, nullable=False)
    sent = Column(Boolean, default=False, nullable=False)

    task = relationship("Task", back_populates="reminders")
