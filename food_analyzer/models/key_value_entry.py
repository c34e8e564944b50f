from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from food_analyzer.database import Base


class KeyValueEntry(Base):
    """One flat key/value pair of the local store."""

    __tablename__ = "key_value_entries"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<KeyValueEntry(key={self.key}, size={len(self.value or '')})>"
