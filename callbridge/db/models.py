"""Database models."""
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    """Registered user."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    mobile = Column(String, nullable=False)
    password_hash = Column(String, nullable=False)


class CallSession(Base):
    """One outbound call attempt, keyed by the provider's conversation id."""

    __tablename__ = "call_sessions"

    id = Column(Integer, primary_key=True, index=True)
    call_id = Column(String, unique=True, index=True, nullable=False)
    phone_number = Column(String, nullable=False)
    status = Column(String, default="initiated", nullable=False)  # initiated, active, completed, failed
    start_time = Column(DateTime, default=utcnow, nullable=False)
    end_time = Column(DateTime, nullable=True)
    duration = Column(Integer, nullable=True)  # seconds
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    conversation_log = relationship(
        "ConversationLogEntry",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="ConversationLogEntry.id",
        lazy="selectin",
    )


class ConversationLogEntry(Base):
    """A single line of a call's conversation log."""

    __tablename__ = "call_log_entries"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("call_sessions.id"), nullable=False)
    timestamp = Column(DateTime, default=utcnow, nullable=False)
    speaker = Column(String, nullable=False)  # user, agent, system
    message = Column(Text, nullable=True)

    # Relationships
    session = relationship("CallSession", back_populates="conversation_log")
