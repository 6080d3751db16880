"""SQLAlchemy ORM models for health score history"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, DateTime, Text, JSON, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class HealthScoreSnapshot(Base):
    """One calculated health score, with the inputs that produced it"""

    __tablename__ = "health_score_snapshot"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    total = Column(Integer, nullable=False)
    level = Column(Integer, nullable=False)
    title = Column(Text, nullable=False)
    payment_consistency = Column(Integer, nullable=False)
    savings_rate = Column(Integer, nullable=False)
    debt_velocity = Column(Integer, nullable=False)
    emergency_buffer = Column(Integer, nullable=False)
    budget_discipline = Column(Integer, nullable=False)
    debt_to_income = Column(Integer, nullable=False)
    score_input = Column(JSON, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )
