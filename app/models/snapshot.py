from sqlalchemy import Column, Integer, Text, DateTime
from sqlalchemy.sql import func

from .base import Base

SNAPSHOT_ROW_ID = 1

class StateSnapshot(Base):
    __tablename__ = "state_snapshots"

    # Single row holding the whole serialized state, overwritten on each flush
    id = Column(Integer, primary_key=True, default=SNAPSHOT_ROW_ID)
    payload = Column(Text, nullable=False)
    saved_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<StateSnapshot(id={self.id}, saved_at={self.saved_at}, size={len(self.payload or '')})>"
