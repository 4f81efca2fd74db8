"""
Completion ledger service
Authoritative "finished" flag per respondent and quiz
"""
import logging
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.orm import Session

from assessment_engine.models import CompletionRecord

logger = logging.getLogger(__name__)


class CompletionService:
    """
    Service for the completion ledger

    The presence of a record, not the number of stored responses, decides
    whether a respondent has finished a quiz.
    """

    def get(self, db: Session, respondent_id: int, quiz_id: int) -> Optional[CompletionRecord]:
        return db.query(CompletionRecord).filter(
            CompletionRecord.respondent_id == respondent_id,
            CompletionRecord.quiz_id == quiz_id,
            CompletionRecord.completed.is_(True)
        ).first()

    def is_completed(self, db: Session, respondent_id: int, quiz_id: int) -> bool:
        return self.get(db, respondent_id, quiz_id) is not None

    def mark_completed(self, db: Session, respondent_id: int, quiz_id: int) -> CompletionRecord:
        """
        Upsert the ledger entry

        The caller owns the transaction; the record is flushed, not committed.
        """
        now = datetime.now(timezone.utc).replace(tzinfo=None)

        record = db.query(CompletionRecord).filter(
            CompletionRecord.respondent_id == respondent_id,
            CompletionRecord.quiz_id == quiz_id
        ).first()

        if record:
            record.completed = True
            record.completed_at = now
        else:
            record = CompletionRecord(
                respondent_id=respondent_id,
                quiz_id=quiz_id,
                completed=True,
                completed_at=now
            )
            db.add(record)

        db.flush()

        logger.info(f"Completion recorded: respondent={respondent_id}, quiz={quiz_id}, at={now.isoformat()}")
        return record

    def clear(self, db: Session, respondent_id: int, quiz_id: int) -> bool:
        """Remove a ledger entry so the respondent can answer again"""

        record = db.query(CompletionRecord).filter(
            CompletionRecord.respondent_id == respondent_id,
            CompletionRecord.quiz_id == quiz_id
        ).first()

        if not record:
            return False

        db.delete(record)
        db.commit()

        logger.info(f"Completion cleared: respondent={respondent_id}, quiz={quiz_id}")
        return True


# Global instance
completion_service = CompletionService()
