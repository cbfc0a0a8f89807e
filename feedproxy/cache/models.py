from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, JSON, LargeBinary

from . import Base


class CachedResponse(Base):
    """A serialized proxy response stored under its normalized request URL"""
    __tablename__ = "cached_responses"

    key = Column(String, primary_key=True)
    status = Column(Integer, nullable=False)
    headers = Column(JSON, nullable=False)
    body = Column(LargeBinary, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
