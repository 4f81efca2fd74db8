"""
ResponseRecord and CompletionRecord models - what a respondent answered
"""
from sqlalchemy import Column, Integer, String, Boolean, TIMESTAMP, ForeignKey, UniqueConstraint, func
from assessment_engine.database import Base


class ResponseRecord(Base):
    """
    Responses table - chosen letter per (respondent, question)

    Uniqueness is not enforced here because imported rows may already hold
    duplicates; the response service upserts instead.
    """
    __tablename__ = "responses"

    id = Column(Integer, primary_key=True, index=True)
    respondent_id = Column(Integer, nullable=False, index=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    letter = Column(String(1), nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<ResponseRecord(respondent_id={self.respondent_id}, question_id={self.question_id}, letter={self.letter})>"


class CompletionRecord(Base):
    """
    Completion ledger - authoritative "finished" flag per (respondent, quiz)
    """
    __tablename__ = "completions"
    __table_args__ = (
        UniqueConstraint("respondent_id", "quiz_id", name="uq_completion_respondent_quiz"),
    )

    id = Column(Integer, primary_key=True, index=True)
    respondent_id = Column(Integer, nullable=False, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    completed = Column(Boolean, nullable=False, default=True)
    completed_at = Column(TIMESTAMP, nullable=False)

    def __repr__(self):
        return f"<CompletionRecord(respondent_id={self.respondent_id}, quiz_id={self.quiz_id}, completed_at={self.completed_at})>"
