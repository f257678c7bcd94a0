"""Smoke tests for the HTTP surface."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from stutter_coach.api import routes
from stutter_coach.coaching.language_coach import LanguageCoach
from stutter_coach.config import Settings
from stutter_coach.errors import DecodeFailure, UpstreamFailure
from stutter_coach.main import create_app
from stutter_coach.models.coaching import CoachSuggestion
from stutter_coach.services import build_services
from stutter_coach.voice.repairer import VoiceRepairer


class FakeVoiceRepairer(VoiceRepairer):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.seen_paths: list[Path] = []
        self.samples: list[bytes] = []

    async def repair(self, sample_path: Path, text: str) -> bytes:
        assert sample_path.exists()
        self.seen_paths.append(sample_path)
        self.samples.append(sample_path.read_bytes())
        if self.fail:
            raise UpstreamFailure("Failed to repair")
        return b"ID3" + text.encode()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        project_root=tmp_path,
        openai_api_key=None,
        elevenlabs_api_key=None,
        profile_store="memory",
        seed_demo_user=True,
    )


@pytest.fixture
def language_coach():
    coach = AsyncMock(spec=LanguageCoach)
    coach.suggest.return_value = CoachSuggestion(
        fluent_sentence="I am fine.", tips="Slow down.", confidence_score=88
    )
    return coach


@pytest.fixture
def voice():
    return FakeVoiceRepairer()


@pytest.fixture
def client(settings, language_coach, voice):
    services = build_services(settings, language_coach=language_coach, voice_repairer=voice)
    with TestClient(create_app(settings, services)) as c:
        yield c


class TestLiveness:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestUsers:
    def test_demo_user_seeded(self, client):
        assert client.get("/users").json() == {"users": ["Demo User"]}
        profile = client.get("/user/Demo User").json()
        assert profile["xp"] == 120
        assert profile["level"] == 2
        assert profile["stats"]["totalSessions"] == 5
        assert "password" not in profile

    def test_unknown_user(self, client):
        response = client.get("/user/ghost")
        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}

    def test_register_and_login(self, client):
        response = client.post("/users", json={"username": " alice ", "password": "pw"})
        assert response.json() == {"success": True, "username": "alice"}
        assert client.post("/login", json={"username": "alice", "password": "pw"}).json() == {
            "success": True
        }
        assert client.post("/login", json={"username": "alice", "password": "x"}).status_code == 401
        assert client.post("/login", json={"username": "bob", "password": "x"}).status_code == 404

    def test_register_validation(self, client):
        assert client.post("/users", json={"username": "alice"}).status_code == 400
        client.post("/users", json={"username": "alice", "password": "pw"})
        duplicate = client.post("/users", json={"username": "alice", "password": "pw"})
        assert duplicate.status_code == 400
        assert duplicate.json() == {"error": "User already exists"}

    def test_malformed_body(self, client):
        response = client.post("/users", content="not json", headers={"Content-Type": "application/json"})
        assert response.status_code == 400


class TestChallenge:
    def test_start_requires_user(self, client):
        assert client.post("/challenge/start", json={}).status_code == 400

    def test_tick_without_challenge(self, client):
        response = client.post("/challenge/tick", json={"userId": "alice", "transcript": "hi"})
        assert response.status_code == 404
        assert response.json() == {"error": "No active challenge"}

    def test_ok_then_repetition(self, client):
        assert client.post("/challenge/start", json={"userId": "alice"}).json() == {
            "status": "started"
        }
        ok = client.post("/challenge/tick", json={"userId": "alice", "transcript": "I am"})
        assert ok.json() == {"status": "ok"}

        fail = client.post("/challenge/tick", json={"userId": "alice", "transcript": "I I am fine"})
        assert fail.json()["status"] == "fail"
        assert "I I" in fail.json()["reason"]

        again = client.post("/challenge/tick", json={"userId": "alice", "transcript": "hello"})
        assert again.status_code == 404

    def test_stop(self, client):
        client.post("/challenge/start", json={"userId": "alice"})
        response = client.post("/challenge/stop", json={"userId": "alice"})
        assert response.json()["status"] == "stopped"
        assert client.post("/challenge/stop", json={"userId": "alice"}).status_code == 404


class TestCoach:
    def test_coach_default_user(self, client):
        response = client.post("/coach", json={"transcript": "hello there", "duration": 30})
        assert response.status_code == 200
        data = response.json()
        assert data["session"]["userId"] == "Demo User"
        assert data["session"]["fluentSentence"] == "I am fine."
        assert data["session"]["confidenceScore"] == 88
        assert data["gamification"]["earnedXp"] == 33
        assert data["userProfile"]["xp"] == 153

    def test_unparseable_reply_falls_back(self, client, language_coach):
        language_coach.suggest.side_effect = DecodeFailure("not json")
        response = client.post("/coach", json={"transcript": "um I I think", "userId": "alice"})
        assert response.status_code == 200
        session = response.json()["session"]
        assert session["fluentSentence"] == "um I I think"
        assert session["confidenceScore"] == session["score"] == 85

    def test_upstream_failure(self, client, language_coach):
        language_coach.suggest.side_effect = UpstreamFailure("Language coach unavailable")
        response = client.post("/coach", json={"transcript": "hello"})
        assert response.status_code == 500
        assert response.json() == {"error": "Language coach unavailable"}

    def test_missing_transcript(self, client):
        assert client.post("/coach", json={}).status_code == 400

    def test_sessions_newest_first(self, client):
        client.post("/coach", json={"transcript": "first", "userId": "alice"})
        client.post("/coach", json={"transcript": "second", "userId": "alice"})
        client.post("/coach", json={"transcript": "other", "userId": "bob"})

        sessions = client.get("/sessions/alice").json()["sessions"]
        assert [s["transcript"] for s in sessions] == ["second", "first"]
        assert client.get("/sessions/nobody").json() == {"sessions": []}


class TestRepair:
    def test_repair_streams_audio_and_cleans_upload(self, client, voice):
        response = client.post(
            "/repair",
            data={"fluentText": "I am fine."},
            files={"audio": ("sample.webm", b"raw-audio", "audio/webm")},
        )
        assert response.status_code == 200
        assert response.headers["content-type"] == "audio/mpeg"
        assert response.content == b"ID3I am fine."
        assert not voice.seen_paths[0].exists()

    def test_upload_saved_off_event_loop(self, client, voice):
        with patch.object(
            routes, "run_in_threadpool", wraps=routes.run_in_threadpool
        ) as threadpool:
            response = client.post(
                "/repair",
                data={"fluentText": "hello"},
                files={"audio": ("sample.webm", b"raw-audio", "audio/webm")},
            )
        assert response.status_code == 200
        assert threadpool.call_args.args[0] is routes._save_upload
        assert voice.samples == [b"raw-audio"]

    def test_missing_inputs(self, client):
        assert client.post("/repair", data={"fluentText": "hi"}).status_code == 400

    def test_failure_still_cleans_upload(self, client, voice):
        voice.fail = True
        response = client.post(
            "/repair",
            data={"fluentText": "hi"},
            files={"audio": ("sample.webm", b"raw-audio", "audio/webm")},
        )
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to repair"}
        assert not voice.seen_paths[0].exists()

    def test_missing_api_key(self, settings):
        services = build_services(settings, language_coach=None, voice_repairer=None)
        with TestClient(create_app(settings, services)) as c:
            response = c.post(
                "/repair",
                data={"fluentText": "hi"},
                files={"audio": ("sample.webm", b"raw-audio", "audio/webm")},
            )
        assert response.status_code == 500
        assert "API Key" in response.json()["error"]
