import pytest
import requests

from sitecorpus.build import build
from sitecorpus.client import Credentials, RemoteSource
from sitecorpus.exceptions import AuthenticationError, NotFoundError, UnreadableSourceError

from conftest import NOW, StubResponse, page

BASE = "https://content.example.org/site"


def build_source(monkeypatch, stub_session, **kwargs):
    monkeypatch.setattr("sitecorpus.client.requests.Session", lambda: stub_session)
    return RemoteSource(BASE, **kwargs)


def test_credentials_are_mutually_exclusive():
    with pytest.raises(ValueError, match="not both"):
        Credentials(token="t", username="u", password="p")
    with pytest.raises(ValueError, match="both username and password"):
        Credentials(username="u")

    assert Credentials(token="t").is_token
    assert Credentials(username="u", password="p").is_basic
    anonymous = Credentials()
    assert not anonymous.is_token and not anonymous.is_basic


def test_session_is_pooled_and_mounted(monkeypatch, stub_session):
    build_source(monkeypatch, stub_session)
    assert stub_session.mounted == ["http://", "https://"]


def test_url_joins_and_quotes_paths(monkeypatch, stub_session):
    source = build_source(monkeypatch, stub_session)
    assert source.url("posts/a.md") == f"{BASE}/posts/a.md"
    assert source.url("/posts/a b.md") == f"{BASE}/posts/a%20b.md"


@pytest.mark.parametrize(
    "payload",
    [
        ["posts/b.md", "/posts/a.md"],
        {"result": ["posts/b.md", "posts/a.md"]},
        {"result": [{"path": "posts/b.md"}, {"path": "posts/a.md"}]},
    ],
)
def test_paths_accepts_manifest_shapes(monkeypatch, stub_session, payload):
    stub_session.queue_response(f"{BASE}/manifest.json", StubResponse(200, payload))
    source = build_source(monkeypatch, stub_session)
    assert source.paths() == ["posts/a.md", "posts/b.md"]


def test_unexpected_manifest_raises(monkeypatch, stub_session):
    stub_session.queue_response(f"{BASE}/manifest.json", StubResponse(200, {"files": 3}))
    source = build_source(monkeypatch, stub_session)
    with pytest.raises(ValueError, match="Unexpected manifest"):
        source.paths()


def test_token_is_sent_as_bearer(monkeypatch, stub_session):
    stub_session.queue_response(f"{BASE}/posts/a.md", StubResponse(200, text="---\n---\n"))
    source = build_source(monkeypatch, stub_session, credentials=Credentials(token="secret"))

    source.request("GET", "posts/a.md", headers={"Authorization": "override", "X-Test": "yes"})

    req = stub_session.request_calls[0]
    assert req["headers"]["Authorization"] == "Bearer secret"
    assert req["headers"]["X-Test"] == "yes"
    assert req["verify"] is True
    assert req["timeout"] == 30.0


def test_basic_auth_is_set_on_session(monkeypatch, stub_session):
    build_source(monkeypatch, stub_session, credentials=Credentials(username="u", password="p"))
    assert stub_session.auth == ("u", "p")


def test_read_defaults_to_utf8(monkeypatch, stub_session):
    resp = StubResponse(200, text="---\ntitle: Ü\n---\n", headers={"Content-Type": "text/markdown"})
    stub_session.queue_response(f"{BASE}/posts/a.md", resp)
    source = build_source(monkeypatch, stub_session)

    assert source.read("posts/a.md") == "---\ntitle: Ü\n---\n"
    assert resp.encoding == "utf-8"


def test_http_errors_raise_source_errors(monkeypatch, stub_session):
    stub_session.queue_response(f"{BASE}/private.md", StubResponse(401, text="login required"))
    source = build_source(monkeypatch, stub_session)

    with pytest.raises(AuthenticationError):
        source.read("private.md")
    with pytest.raises(NotFoundError):
        source.read("missing.md")


def test_context_manager_closes_session(monkeypatch, stub_session):
    with build_source(monkeypatch, stub_session):
        pass
    assert stub_session.closed


def test_remote_build_isolates_unreadable_files(monkeypatch, stub_session):
    stub_session.queue_response(
        f"{BASE}/manifest.json",
        StubResponse(200, ["authors/tom.md", "posts/a.md", "posts/gone.md"]),
    )
    stub_session.queue_response(f"{BASE}/authors/tom.md", StubResponse(200, text=page(name="Tom")))
    stub_session.queue_response(
        f"{BASE}/posts/a.md",
        StubResponse(200, text=page(title="A", date="2023-01-17", authors=["tom"])),
    )
    source = build_source(monkeypatch, stub_session)

    report = build(source, now=NOW)

    assert [d.id for d in report.site.by_author["tom"]] == ["posts/a"]
    (error,) = report.errors
    assert isinstance(error, UnreadableSourceError)
    assert error.path == "posts/gone.md"


@pytest.mark.parametrize(
    "failure",
    [
        requests.exceptions.RetryError("Max retries exceeded (too many 503 error responses)"),
        requests.exceptions.ConnectionError("connection reset"),
        requests.exceptions.Timeout("read timed out"),
    ],
)
def test_remote_build_isolates_transport_failures(monkeypatch, stub_session, failure):
    stub_session.queue_response(f"{BASE}/manifest.json", StubResponse(200, ["posts/a.md", "posts/b.md"]))
    stub_session.queue_response(f"{BASE}/posts/a.md", StubResponse(200, text=page(title="A", date="2023-01-17")))
    stub_session.queue_response(f"{BASE}/posts/b.md", failure)
    source = build_source(monkeypatch, stub_session)

    report = build(source, now=NOW)

    assert report.site.documents.ids() == ["posts/a"]
    (error,) = report.errors
    assert isinstance(error, UnreadableSourceError)
    assert error.path == "posts/b.md"
    assert str(failure) in error.detail
