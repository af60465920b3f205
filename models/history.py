from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, DateTime, Text, func, Index

from models.base import Base


class HistoryEntry(Base):
    __tablename__ = 'history_entries'

    # Back-reference by (entity_type, entity_id) only. No foreign key, so the
    # audit trail survives deletion of its subject.
    id = Column(Integer, primary_key=True)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(Integer, nullable=False)
    actor_id = Column(Integer, nullable=True)  # None for customer-initiated actions (checkout)
    action = Column(String(50), nullable=False)
    before_json = Column(Text, nullable=True)
    after_json = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    __table_args__ = (
        Index('ix_history_entries_entity', 'entity_type', 'entity_id'),
    )


class HistoryEntryDTO(BaseModel):
    id: int | None = None
    entity_type: str
    entity_id: int
    actor_id: int | None = None
    action: str
    before: dict | None = None
    after: dict | None = None
    created_at: datetime | None = None
