from sqlalchemy import Column, String, Text, DateTime
from .database import Base
from datetime import datetime

class KeyValueEntryDB(Base):
    __tablename__ = "key_value_entries"

    key = Column(String, primary_key=True, index=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
