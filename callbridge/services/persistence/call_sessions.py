"""Call session persistence service."""
from datetime import datetime
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from callbridge.db.models import CallSession, ConversationLogEntry, utcnow


class CallSessionPersistenceService:
    """Service for persisting call sessions and their conversation logs."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_session(
        self,
        call_id: str,
        phone_number: str,
        log_message: Optional[str] = None,
    ) -> CallSession:
        """Create an ``initiated`` session, optionally seeded with a system log line."""
        now = utcnow()
        session = CallSession(
            call_id=call_id,
            phone_number=phone_number,
            status="initiated",
            start_time=now,
            created_at=now,
        )
        if log_message is not None:
            session.conversation_log.append(
                ConversationLogEntry(timestamp=now, speaker="system", message=log_message)
            )
        self.db.add(session)
        await self.db.commit()
        await self.db.refresh(session)
        return session

    async def get_session_by_call_id(self, call_id: str) -> Optional[CallSession]:
        """Get session by provider conversation id."""
        result = await self.db.execute(
            select(CallSession).where(CallSession.call_id == call_id)
        )
        return result.scalar_one_or_none()

    async def complete_session(
        self, session: CallSession, ended_at: Optional[datetime] = None
    ) -> CallSession:
        """Mark a session completed and compute its duration in whole seconds."""
        ended_at = ended_at or utcnow()
        session.status = "completed"
        session.end_time = ended_at
        session.duration = int((ended_at - session.start_time).total_seconds())
        await self.db.commit()
        await self.db.refresh(session)
        return session
