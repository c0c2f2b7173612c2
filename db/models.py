"""
SQLAlchemy ↔️ Pydantic mapping for log entries.

Both variants share one table; variant-specific columns are nullable.
"""
from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    String,
    Text,
)

from db.engine import Base


class LogEntryORM(Base):
    __tablename__ = "logs"

    id = Column(String, primary_key=True)
    type = Column(String, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)
    notes = Column(Text)
    medication_name = Column(String)
    dosage = Column(String)
    severity = Column(Integer)
    description = Column(String)
