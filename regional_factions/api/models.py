"""
SQLAlchemy models for players and campaigns.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, ForeignKey

from .database import Base


class Player(Base):
    __tablename__ = "players"

    id = Column(String(36), primary_key=True)  # uuid
    email = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(64), unique=True, nullable=False, index=True)  # display name, no spaces/special
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class Campaign(Base):
    __tablename__ = "campaigns"

    id = Column(String(36), primary_key=True)  # uuid
    name = Column(String(128), nullable=False)
    campaign_code = Column(String(8), unique=True, nullable=False, index=True)  # 4-char alphanumeric join code
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    gm_id = Column(String(36), ForeignKey("players.id"), nullable=True)  # only the GM may edit the ledger
    setup_id = Column(String(64), nullable=True)
    ledger = Column(Text, nullable=False)  # JSON ledger document
    members = Column(Text, nullable=False)  # JSON array of player ids allowed to read
