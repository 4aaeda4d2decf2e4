from datetime import datetime
from sqlalchemy import Column, String, DateTime
import uuid

from jobboard.database import Base
from jobboard.database_types import GUID


class AnonymousSession(Base):
    """An anonymous identity handed to a browser on first load."""
    __tablename__ = "anonymous_sessions"
    
    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    
    # Audit fields
    created_ip = Column(String(45), nullable=True)  # IPv4 or IPv6
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_seen_at = Column(DateTime, default=datetime.utcnow, nullable=False)
