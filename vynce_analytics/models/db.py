"""SQLAlchemy models for persisted analytics state"""
import datetime

from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.orm import declarative_base

Base = declarative_base()

class GamificationStateRecord(Base):
    """
    Whole gamification state serialized under a single fixed key.
    The row is overwritten on every mutation; there is no delta history.
    """
    __tablename__ = 'gamification_state'

    key = Column(String, primary_key=True)
    state = Column(JSON, nullable=False)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.datetime.now(datetime.UTC),
        onupdate=lambda: datetime.datetime.now(datetime.UTC)
    )
