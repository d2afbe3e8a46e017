from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func

from aurora_go.database import Base


class AppState(Base):
    """Small durable key/value record (e.g. daily summary last-sent date)."""

    __tablename__ = "app_state"

    key = Column(String(64), primary_key=True)
    value = Column(String(255), nullable=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
