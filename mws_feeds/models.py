"""Database models for the feeds CLI."""

from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class FeedResultRecord(Base):
    __tablename__ = "feed_results"

    id = Column(Integer, primary_key=True, index=True)
    feed_submission_id = Column(String(50), index=True, nullable=False)
    code = Column(String(20), nullable=True, index=True)
    messages = Column(Text, nullable=False)
    raw_size = Column(Integer, default=0)
    saved_path = Column(String(1000), nullable=True)
    mock = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
