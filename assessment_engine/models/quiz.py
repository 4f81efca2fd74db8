"""
Quiz, Question and AnswerOption models - authored assessments
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, TIMESTAMP, ForeignKey, func
from sqlalchemy.orm import relationship
from assessment_engine.database import Base


class Quiz(Base):
    """
    Quizzes table - a dated set of ordered questions, immutable once created
    """
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, index=True)
    period = Column(String(50), nullable=False)  # free-text month label
    year = Column(Integer, nullable=False)
    folder_id = Column(Integer, ForeignKey("folders.id"), index=True)
    created_at = Column(TIMESTAMP, server_default=func.now())

    questions = relationship(
        "Question",
        back_populates="quiz",
        order_by="Question.number",
        cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Quiz(id={self.id}, period={self.period}, year={self.year})>"


class Question(Base):
    """
    Questions table - `number` is the 1-based position within the quiz
    """
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    number = Column(Integer, nullable=False)
    prompt = Column(Text, nullable=False)
    image_url = Column(String(1024))
    subject = Column(String(255))
    difficulty = Column(String(20))  # easy|medium|hard, legacy rows may differ

    quiz = relationship("Quiz", back_populates="questions")
    options = relationship(
        "AnswerOption",
        back_populates="question",
        order_by="AnswerOption.letter",
        cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Question(id={self.id}, quiz_id={self.quiz_id}, number={self.number})>"


class AnswerOption(Base):
    """
    Answer options table - exactly one per question should be correct
    """
    __tablename__ = "answer_options"

    id = Column(Integer, primary_key=True, index=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    letter = Column(String(1), nullable=False)
    text = Column(Text)
    image_url = Column(String(1024))
    is_correct = Column(Boolean, nullable=False, default=False)

    question = relationship("Question", back_populates="options")

    def __repr__(self):
        return f"<AnswerOption(question_id={self.question_id}, letter={self.letter}, correct={self.is_correct})>"
