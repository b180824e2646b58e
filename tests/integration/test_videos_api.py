"""API tests for video registration, listing and deletion"""
import pytest
from sqlalchemy import select

from collection.clients.source import StubVideoSource
from core.models import Video, VideoMetricsSnapshot

RICK = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
GANGNAM = "https://youtu.be/9bZkp7q19f0"


class TestAuth:

    def test_missing_credential_is_401(self, client):
        response = client.get("/api/v1/videos/mine")
        assert response.status_code == 401
        error = response.json()["detail"]["error"]
        assert error["code"] == "AUTH_REQUIRED"
        assert error["trace_id"].startswith("api_")
        assert response.headers["www-authenticate"] == "Bearer"

    def test_non_bearer_scheme_is_401(self, client):
        response = client.get("/api/v1/videos/mine", headers={"Authorization": "Basic abc"})
        assert response.status_code == 401

    def test_unknown_credential_is_403(self, client):
        response = client.get("/api/v1/videos/mine", headers={"Authorization": "Bearer nobody"})
        assert response.status_code == 403
        error = response.json()["detail"]["error"]
        assert error["code"] == "INVALID_TOKEN"
        assert error["trace_id"].startswith("api_")


class TestAddVideo:

    def test_add_video_records_first_snapshot(self, client, make_user, auth_headers, db_session):
        user = make_user()

        response = client.post("/api/v1/videos", json={"videoUrl": RICK}, headers=auth_headers(user))

        assert response.status_code == 201
        body = response.json()
        assert body["userId"] == user.id
        assert body["videoId"] == "dQw4w9WgXcQ"
        assert body["title"] == "Title dQw4w9WgXcQ"
        assert body["url"] == RICK
        assert len(body["analytics"]) == 1
        assert body["analytics"][0]["views"] == 1000
        assert body["analytics"][0]["likes"] == 50
        assert body["analytics"][0]["comments"] == 7
        assert body["analytics"][0]["position"] == 0

        db_session.expire_all()
        video = db_session.get(Video, body["id"])
        assert [s.view_count for s in video.metrics_snapshots] == [1000]

    def test_short_url_form(self, client, make_user, auth_headers):
        response = client.post("/api/v1/videos", json={"videoUrl": GANGNAM}, headers=auth_headers(make_user()))
        assert response.status_code == 201
        assert response.json()["videoId"] == "9bZkp7q19f0"

    def test_invalid_url_is_400(self, client, make_user, auth_headers, stub_source):
        response = client.post(
            "/api/v1/videos", json={"videoUrl": "https://vimeo.com/123"}, headers=auth_headers(make_user())
        )
        assert response.status_code == 400
        assert response.json()["detail"]["error"]["code"] == "INVALID_VIDEO_URL"
        assert stub_source.calls == []

    def test_missing_body_field_is_422(self, client, make_user, auth_headers):
        response = client.post("/api/v1/videos", json={}, headers=auth_headers(make_user()))
        assert response.status_code == 422

    def test_duplicate_is_409(self, client, make_user, auth_headers, db_session):
        headers = auth_headers(make_user())
        assert client.post("/api/v1/videos", json={"videoUrl": RICK}, headers=headers).status_code == 201

        response = client.post("/api/v1/videos", json={"videoUrl": RICK}, headers=headers)

        assert response.status_code == 409
        assert response.json()["detail"]["error"]["code"] == "VIDEO_ALREADY_EXISTS"
        db_session.expire_all()
        assert len(db_session.scalars(select(Video)).all()) == 1

    def test_same_video_for_two_users(self, client, make_user, auth_headers):
        for user in (make_user(), make_user()):
            response = client.post("/api/v1/videos", json={"videoUrl": RICK}, headers=auth_headers(user))
            assert response.status_code == 201

    def test_unknown_video_is_404(self, client, make_user, auth_headers, db_session):
        response = client.post(
            "/api/v1/videos",
            json={"videoUrl": "https://www.youtube.com/watch?v=zzzzzzzzzzz"},
            headers=auth_headers(make_user())
        )
        assert response.status_code == 404
        db_session.expire_all()
        assert db_session.scalars(select(Video)).all() == []

    def test_source_failure_is_503_and_writes_nothing(self, client, make_user, auth_headers, stub_source, db_session):
        stub_source.failing.add("dQw4w9WgXcQ")

        response = client.post("/api/v1/videos", json={"videoUrl": RICK}, headers=auth_headers(make_user()))

        assert response.status_code == 503
        error = response.json()["detail"]["error"]
        assert error["code"] == "DEPENDENCY_UNAVAILABLE"
        assert error["trace_id"].startswith("api_")
        db_session.expire_all()
        assert db_session.scalars(select(Video)).all() == []
        assert db_session.scalars(select(VideoMetricsSnapshot)).all() == []

    def test_concurrent_registration_is_409(self, client, make_user, auth_headers, session_factory,
                                            video_stats, db_session):
        from app.deps.common import get_video_source
        from app.main import app

        user = make_user()
        owner_id = user.id

        class RacingSource(StubVideoSource):
            """Another request registers the same video while this one fetches"""

            def fetch(self, video_id):
                with session_factory() as other:
                    other.add(Video(
                        owner_id=owner_id, video_id=video_id, title="Winner",
                        thumbnail_url="https://img.youtube.com/vi/x/mqdefault.jpg", url=RICK,
                    ))
                    other.commit()
                return super().fetch(video_id)

        source = RacingSource({"dQw4w9WgXcQ": video_stats("dQw4w9WgXcQ", 1000)})
        app.dependency_overrides[get_video_source] = lambda: source

        response = client.post("/api/v1/videos", json={"videoUrl": RICK}, headers=auth_headers(user))

        assert response.status_code == 409
        assert response.json()["detail"]["error"]["code"] == "VIDEO_ALREADY_EXISTS"
        db_session.expire_all()
        assert [v.title for v in db_session.scalars(select(Video)).all()] == ["Winner"]
        assert db_session.scalars(select(VideoMetricsSnapshot)).all() == []


class TestListVideos:

    def test_mine_only_returns_own_videos(self, client, make_user, auth_headers):
        alice, bob = make_user("alice"), make_user("bob")
        client.post("/api/v1/videos", json={"videoUrl": RICK}, headers=auth_headers(alice))
        client.post("/api/v1/videos", json={"videoUrl": GANGNAM}, headers=auth_headers(bob))

        response = client.get("/api/v1/videos/mine", headers=auth_headers(alice))

        assert response.status_code == 200
        assert [v["videoId"] for v in response.json()] == ["dQw4w9WgXcQ"]

    def test_mine_is_newest_first(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())
        client.post("/api/v1/videos", json={"videoUrl": RICK}, headers=headers)
        client.post("/api/v1/videos", json={"videoUrl": GANGNAM}, headers=headers)

        response = client.get("/api/v1/videos/mine", headers=headers)

        assert [v["videoId"] for v in response.json()] == ["9bZkp7q19f0", "dQw4w9WgXcQ"]

    def test_all_includes_owner(self, client, make_user, auth_headers):
        alice, bob = make_user("alice"), make_user("bob")
        client.post("/api/v1/videos", json={"videoUrl": RICK}, headers=auth_headers(alice))
        client.post("/api/v1/videos", json={"videoUrl": GANGNAM}, headers=auth_headers(bob))

        response = client.get("/api/v1/videos/all", headers=auth_headers(alice))

        assert response.status_code == 200
        owners = {v["videoId"]: v["owner"]["name"] for v in response.json()}
        assert owners == {"dQw4w9WgXcQ": "alice", "9bZkp7q19f0": "bob"}


class TestDeleteVideo:

    @pytest.fixture
    def added(self, client, make_user, auth_headers):
        owner = make_user()
        response = client.post("/api/v1/videos", json={"videoUrl": RICK}, headers=auth_headers(owner))
        return owner, response.json()["id"]

    def test_owner_deletes_video_and_snapshots(self, client, added, auth_headers, db_session):
        owner, video_pk = added

        response = client.delete(f"/api/v1/videos/{video_pk}", headers=auth_headers(owner))

        assert response.status_code == 200
        assert response.json() == {"message": "Video deleted successfully"}
        db_session.expire_all()
        assert db_session.get(Video, video_pk) is None
        assert db_session.scalars(select(VideoMetricsSnapshot)).all() == []

    def test_other_user_gets_404(self, client, added, make_user, auth_headers, db_session):
        _, video_pk = added

        response = client.delete(f"/api/v1/videos/{video_pk}", headers=auth_headers(make_user()))

        assert response.status_code == 404
        db_session.expire_all()
        assert db_session.get(Video, video_pk) is not None

    def test_unknown_video_is_404(self, client, make_user, auth_headers):
        response = client.delete("/api/v1/videos/does-not-exist", headers=auth_headers(make_user()))
        assert response.status_code == 404
        assert response.json()["detail"]["error"]["code"] == "VIDEO_NOT_FOUND"
