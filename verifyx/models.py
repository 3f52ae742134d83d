from sqlalchemy import Column, Integer, String, DateTime, JSON, Text
from datetime import datetime
from verifyx.database import Base

class Report(Base):
    """A verdict submitted by a user for later review"""
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    type = Column(String(50), default="text")
    value = Column(Text, nullable=False)

    # Stored as a JSON-encoded array
    reasons = Column(JSON, default=list)
    score = Column(Integer, default=0, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
