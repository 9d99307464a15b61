import io

import pytest
import requests

from videos.exceptions import (
    CredentialsMissingError,
    UploadInitError,
    UploadTransferError,
    VideoHostError,
)
from videos.mux import MuxClient, UploadTarget
from videos.tests.fakes import FakeResponse, FakeSession


def make_client(handler, **kwargs):
    session = FakeSession(handler)
    kwargs.setdefault("token_id", "tok")
    kwargs.setdefault("token_secret", "sec")
    client = MuxClient(kwargs.pop("token_id"), kwargs.pop("token_secret"), session=session, **kwargs)
    return client, session


def test_create_upload_target_posts_settings_with_basic_auth():
    def handler(method, url, **kwargs):
        return FakeResponse(201, {"data": {"id": "up_1", "url": "https://storage.example.com/up_1"}})

    client, session = make_client(handler, base_url="https://api.mux.test/")

    target = client.create_upload_target()

    assert target == UploadTarget(url="https://storage.example.com/up_1", upload_id="up_1")
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", "https://api.mux.test/video/v1/uploads")
    assert kwargs["auth"] == ("tok", "sec")
    assert kwargs["json"] == {
        "new_asset_settings": {"playback_policy": ["public"]},
        "cors_origin": "*",
    }


def test_create_upload_target_non_2xx_raises_init_error():
    client, _ = make_client(lambda m, u, **kw: FakeResponse(401, text="unauthorized"))

    with pytest.raises(UploadInitError, match="401"):
        client.create_upload_target()


def test_create_upload_target_network_error_raises_init_error():
    def handler(method, url, **kwargs):
        raise requests.ConnectionError("boom")

    client, _ = make_client(handler)

    with pytest.raises(UploadInitError):
        client.create_upload_target()


def test_create_upload_target_malformed_body_raises_init_error():
    client, _ = make_client(lambda m, u, **kw: FakeResponse(201, {"data": {"id": "up_1"}}))

    with pytest.raises(UploadInitError):
        client.create_upload_target()


def test_missing_credentials_fail_before_any_request():
    client, session = make_client(lambda m, u, **kw: FakeResponse(201, {}), token_id=None)

    with pytest.raises(CredentialsMissingError):
        client.create_upload_target()
    with pytest.raises(CredentialsMissingError):
        client.get_upload_status("up_1")
    assert session.calls == []


def test_transfer_streams_body_with_declared_content_type():
    client, session = make_client(lambda m, u, **kw: FakeResponse(200))
    stream = io.BytesIO(b"video-bytes")

    client.transfer("https://storage.example.com/up_1", stream, "video/quicktime")

    method, url, kwargs = session.calls[0]
    assert (method, url) == ("PUT", "https://storage.example.com/up_1")
    assert kwargs["data"] is stream
    assert kwargs["headers"] == {"Content-Type": "video/quicktime"}
    assert "auth" not in kwargs


def test_transfer_defaults_content_type():
    client, session = make_client(lambda m, u, **kw: FakeResponse(200))

    client.transfer("https://storage.example.com/up_1", io.BytesIO(b"x"), None)

    assert session.calls[0][2]["headers"] == {"Content-Type": "application/octet-stream"}


@pytest.mark.parametrize("outcome", [FakeResponse(500, text="nope"), requests.Timeout("slow")])
def test_transfer_failures_raise_transfer_error(outcome):
    def handler(method, url, **kwargs):
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    client, _ = make_client(handler)

    with pytest.raises(UploadTransferError):
        client.transfer("https://storage.example.com/up_1", io.BytesIO(b"x"), "video/mp4")


def test_get_upload_status_returns_asset_id_or_none():
    bodies = iter([
        {"data": {"id": "up_1", "status": "waiting"}},
        {"data": {"id": "up_1", "status": "asset_created", "asset_id": "as_9"}},
    ])
    client, session = make_client(lambda m, u, **kw: FakeResponse(200, next(bodies)))

    assert client.get_upload_status("up_1") is None
    assert client.get_upload_status("up_1") == "as_9"
    assert session.calls[0][1] == "https://api.mux.com/video/v1/uploads/up_1"


def test_get_asset_status_lists_playback_ids():
    body = {"data": {"id": "as_9", "playback_ids": [{"id": "pb_123", "policy": "public"}, {"id": "pb_456"}]}}
    client, session = make_client(lambda m, u, **kw: FakeResponse(200, body))

    assert client.get_asset_status("as_9") == ["pb_123", "pb_456"]
    assert session.calls[0][1] == "https://api.mux.com/video/v1/assets/as_9"


def test_get_asset_status_without_playback_ids_is_empty():
    client, _ = make_client(lambda m, u, **kw: FakeResponse(200, {"data": {"id": "as_9", "status": "preparing"}}))

    assert client.get_asset_status("as_9") == []


@pytest.mark.parametrize(
    "response",
    [FakeResponse(404, text="missing"), FakeResponse(200, None), FakeResponse(200, {"data": []})],
)
def test_status_query_failures_raise_video_host_error(response):
    client, _ = make_client(lambda m, u, **kw: response)

    with pytest.raises(VideoHostError):
        client.get_upload_status("up_1")


@pytest.mark.parametrize("playback_ids", [[None], ["pb_123"], {"id": "pb_123"}, "pb_123"])
def test_malformed_playback_ids_raise_video_host_error(playback_ids):
    client, _ = make_client(lambda m, u, **kw: FakeResponse(200, {"data": {"playback_ids": playback_ids}}))

    with pytest.raises(VideoHostError, match="malformed"):
        client.get_asset_status("as_9")


def test_close_releases_the_session():
    client, session = make_client(lambda m, u, **kw: FakeResponse(200, {"data": {}}))

    client.close()

    assert session.closed


def test_from_settings_reads_mux_configuration(settings):
    settings.MUX_TOKEN_ID = "id-from-env"
    settings.MUX_TOKEN_SECRET = "secret-from-env"
    settings.MUX_API_BASE_URL = "https://mux.internal"
    settings.MUX_PLAYBACK_POLICY = "signed"

    client = MuxClient.from_settings()

    assert client.token_id == "id-from-env"
    assert client.base_url == "https://mux.internal"
    assert client.playback_policy == "signed"
