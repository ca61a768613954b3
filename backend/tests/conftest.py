"""Test configuration and fixtures for the relay API tests."""

import os
import tempfile

# Set test environment variables before importing app modules
os.environ.setdefault("PAPAGO_BASE", "https://papago.test/doc-trans/v1")
os.environ.setdefault("NCP_KEY_ID", "test-key-id")
os.environ.setdefault("NCP_KEY", "test-key-secret")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp())

import httpx
import pytest
from fastapi.testclient import TestClient

from docrelay.config import Settings
from docrelay.main import create_app

API_BASE = "https://papago.test/doc-trans/v1"


class CountingStream(httpx.AsyncByteStream):
    """Upstream body that records how many chunks were pulled."""

    def __init__(self, chunks):
        self.chunks = chunks
        self.pulled = 0
        self.closed = False

    async def __aiter__(self):
        for chunk in self.chunks:
            self.pulled += 1
            yield chunk

    async def aclose(self):
        self.closed = True


class FakeRemote:
    """Stand-in for the remote translation API, used as an httpx.MockTransport handler."""

    def __init__(
        self,
        request_id="42",
        statuses=("COMPLETE",),
        result=b"translated document bytes",
        submit_status=200,
        submit_payload=None,
        status_code=200,
        download_status=200,
        raise_on=None,
        upload_dir=None,
    ):
        self.request_id = request_id
        self.statuses = list(statuses)
        self.result = result
        self.submit_status = submit_status
        self.submit_payload = submit_payload
        self.status_code = status_code
        self.download_status = download_status
        self.raise_on = raise_on or {}
        self.upload_dir = upload_dir
        self.calls = []
        self.requests = []
        self.files_seen_on_submit = None
        self.download_stream = None

    def count(self, operation):
        return self.calls.count(operation)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        operation = request.url.path.rsplit("/", 1)[-1]
        self.calls.append(operation)
        self.requests.append(request)

        if operation in self.raise_on:
            raise self.raise_on[operation]("simulated failure", request=request)

        if operation == "translate":
            if self.upload_dir is not None:
                self.files_seen_on_submit = sorted(p.name for p in self.upload_dir.iterdir())
            payload = self.submit_payload
            if payload is None:
                payload = {"data": {"requestId": self.request_id}}
            return httpx.Response(self.submit_status, json=payload)

        if operation == "status":
            status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
            if self.status_code != 200:
                return httpx.Response(self.status_code, text="gateway error")
            return httpx.Response(200, json={"data": {"requestId": self.request_id, "status": status}})

        if operation == "download":
            if self.download_status != 200:
                return httpx.Response(self.download_status, text="download failed")
            self.download_stream = CountingStream(
                [self.result[i : i + 1024] for i in range(0, len(self.result), 1024)]
            )
            return httpx.Response(200, stream=self.download_stream)

        return httpx.Response(404)


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def public_dir(tmp_path):
    root = tmp_path / "public"
    (root / "user_guide" / "en").mkdir(parents=True)
    (root / "index.html").write_text("<html>app shell</html>")
    (root / "app.js").write_text("console.log('app');")
    (root / "user_guide" / "index.html").write_text("<html>guide index</html>")
    (root / "user_guide" / "en" / "start.html").write_text("<html>getting started</html>")
    return root


@pytest.fixture
def settings(upload_dir, public_dir):
    """Fast polling settings pointing at the fake remote."""
    return Settings(
        _env_file=None,
        papago_base=API_BASE,
        ncp_key_id="test-key-id",
        ncp_key="test-key-secret",
        upload_dir=upload_dir,
        public_dir=public_dir,
        poll_interval_seconds=0.0,
        job_deadline_seconds=5.0,
    )


@pytest.fixture
def remote(upload_dir):
    return FakeRemote(upload_dir=upload_dir)


@pytest.fixture
def make_client(settings):
    """Build a TestClient around a given fake remote."""
    clients = []

    def _make(fake, **overrides):
        app_settings = settings.model_copy(update=overrides) if overrides else settings
        app = create_app(app_settings, transport=httpx.MockTransport(fake))
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, remote):
    return make_client(remote)


@pytest.fixture
def upload():
    """Multipart payload for a small presentation."""

    def _upload(name="report.pptx", content=b"PK\x03\x04 fake pptx", source="en", target="ko-KR"):
        files = {"file": (name, content, "application/octet-stream")}
        data = {}
        if source is not None:
            data["source"] = source
        if target is not None:
            data["target"] = target
        return {"files": files, "data": data}

    return _upload
