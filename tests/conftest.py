# tests/conftest.py
"""
Shared fixtures: in-memory SQLite database, sessions and an HTTP client
"""
import os

# Settings are read at import time, so the environment comes first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"
os.environ["RATE_LIMIT_PER_MINUTE"] = "100000"
os.environ["RATE_LIMIT_PER_HOUR"] = "100000"
os.environ.pop("NOTIFICATION_WEBHOOK_URL", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import assessment_engine.models  # noqa: F401
from assessment_engine.database import Base, get_db
from assessment_engine.main import app
from assessment_engine.schemas.quiz import AnswerOptionCreate, QuestionCreate
from assessment_engine.services.quiz_service import quiz_service


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def question(prompt="What is 2 + 2?", subject="Math", difficulty="easy", correct="a", letters="abcd"):
    """Build a question payload whose correct option is `correct`"""
    return QuestionCreate(
        prompt=prompt,
        subject=subject,
        difficulty=difficulty,
        options=[
            AnswerOptionCreate(letter=letter, text=f"Option {letter}", is_correct=(letter == correct))
            for letter in letters
        ]
    )


@pytest.fixture
def make_quiz(db):
    """Factory creating a quiz through the catalog service"""
    def _make(questions=None, period="March", year=2024, folder_id=None):
        if questions is None:
            questions = [
                question(subject="Math", difficulty="easy", correct="a"),
                question(subject="Physics", difficulty="medium", correct="b"),
                question(subject="Math", difficulty="hard", correct="c"),
            ]
        return quiz_service.create_quiz(
            db, period=period, year=year, questions=questions, folder_id=folder_id
        )
    return _make
