# tests/test_cache.py
"""
Tests for cache.py and the result cache around completion
"""
import json

import pytest
import redis

from assessment_engine.config import settings
from assessment_engine.services.analytics_service import analytics_service
from assessment_engine.services.completion_service import completion_service
from assessment_engine.services.response_service import response_service
from assessment_engine.utils import cache as cache_module
from assessment_engine.utils.cache import CacheService, cache_service

RESPONDENT = 8


class FakeRedis:
    """Dictionary-backed stand-in for the redis client"""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    def ping(self):
        return True

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl

    def delete(self, key):
        self.store.pop(key, None)


class UnreachableRedis:

    def ping(self):
        raise redis.ConnectionError("Connection refused")

    def get(self, key):
        raise redis.ConnectionError("Connection refused")

    def setex(self, key, ttl, value):
        raise redis.ConnectionError("Connection refused")

    def delete(self, key):
        raise redis.ConnectionError("Connection refused")


@pytest.fixture
def fake_redis(monkeypatch):
    client = FakeRedis()
    monkeypatch.setattr(cache_service, "redis_client", client)
    return client


class TestCacheService:

    def test_unreachable_at_startup_disables_cache(self, monkeypatch):
        monkeypatch.setattr(cache_module.redis, "from_url", lambda *args, **kwargs: UnreachableRedis())

        service = CacheService(url="redis://cache.invalid:6379/0")

        assert service.redis_client is None
        assert service.get("result:1:1") is None
        assert service.set("result:1:1", {"correct": 1}) is False
        assert service.delete("result:1:1") is False

    def test_connection_lost_after_startup(self):
        service = CacheService(enabled=False)
        service.redis_client = UnreachableRedis()

        assert service.get("result:1:1") is None
        assert service.set("result:1:1", {"correct": 1}) is False
        assert service.delete("result:1:1") is False

    def test_set_and_get_json(self):
        service = CacheService(enabled=False)
        service.redis_client = FakeRedis()

        assert service.set("result:1:2", {"percentage": 67}) is True

        assert service.get("result:1:2") == {"percentage": 67}
        assert service.redis_client.ttls["result:1:2"] == settings.RESULT_CACHE_TTL

    def test_corrupt_value_is_a_miss(self):
        service = CacheService(enabled=False)
        service.redis_client = FakeRedis()
        service.redis_client.store["result:1:2"] = "{not json"

        assert service.get("result:1:2") is None


class TestResultCache:

    def test_result_is_cached_after_first_read(self, db, make_quiz, fake_redis):
        quiz = make_quiz()
        response_service.submit_answer(db, quiz.id, RESPONDENT, quiz.questions[-1].id, "c")
        key = analytics_service.cache_key(quiz.id, RESPONDENT)

        first = analytics_service.get_result(db, quiz.id, RESPONDENT)

        assert json.loads(fake_redis.store[key])["percentage"] == first["percentage"]
        assert analytics_service.get_result(db, quiz.id, RESPONDENT) == first

    def test_completion_drops_stale_result(self, db, make_quiz, fake_redis):
        quiz = make_quiz()
        key = analytics_service.cache_key(quiz.id, RESPONDENT)
        fake_redis.store[key] = json.dumps({"percentage": 100, "stale": True})

        response_service.submit_answer(db, quiz.id, RESPONDENT, quiz.questions[-1].id, "a")

        assert key not in fake_redis.store
        result = analytics_service.get_result(db, quiz.id, RESPONDENT)
        assert "stale" not in result
        assert result["correct"] == 0

    def test_answering_again_after_reset_is_not_stale(self, db, make_quiz, fake_redis):
        quiz = make_quiz()
        last = quiz.questions[-1].id
        response_service.submit_answer(db, quiz.id, RESPONDENT, last, "a")
        assert analytics_service.get_result(db, quiz.id, RESPONDENT)["correct"] == 0

        completion_service.clear(db, RESPONDENT, quiz.id)
        response_service.submit_answer(db, quiz.id, RESPONDENT, last, "c")

        assert analytics_service.get_result(db, quiz.id, RESPONDENT)["correct"] == 1


class TestClearCompletionEndpoint:

    def test_reset_drops_cached_result(self, client, fake_redis):
        payload = {
            "period": "April",
            "year": 2024,
            "questions": [{
                "prompt": "1 + 1?",
                "subject": "Math",
                "difficulty": "easy",
                "options": [{"text": "2", "is_correct": True}, {"text": "3"}]
            }]
        }
        quiz = client.post("/api/quizzes", json=payload).json()
        question_id = quiz["questions"][0]["id"]
        base = f"/api/quizzes/{quiz['id']}"
        key = analytics_service.cache_key(quiz["id"], RESPONDENT)

        client.post(f"{base}/attempts/{RESPONDENT}/responses", json={"question_id": question_id, "letter": "b"})
        assert client.get(f"{base}/results/{RESPONDENT}").json()["percentage"] == 0
        assert key in fake_redis.store

        assert client.delete(f"{base}/attempts/{RESPONDENT}/completion").status_code == 204
        assert key not in fake_redis.store

        client.post(f"{base}/attempts/{RESPONDENT}/responses", json={"question_id": question_id, "letter": "a"})
        assert client.get(f"{base}/results/{RESPONDENT}").json()["percentage"] == 100
