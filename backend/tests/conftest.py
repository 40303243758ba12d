# backend/tests/conftest.py
import os, sys, pathlib, tempfile, pytest
import requests
from fastapi.testclient import TestClient

BACKEND_DIR = pathlib.Path(__file__).resolve().parents[1]   # .../backend
TMP_DIR = pathlib.Path(tempfile.mkdtemp(prefix="supplier-dashboard-tests-"))
DB_PATH = TMP_DIR / "test.db"

# Make `from supplier_dashboard.*` importable
sys.path.insert(0, str(BACKEND_DIR))

# Settings are read once (cached), so point them at test resources before any import
os.environ["DATABASE_URL"] = f"sqlite:///{DB_PATH.as_posix()}"
os.environ["ANALYTICS_GRAPHQL_URL"] = "https://upstream.test/graphql"
os.environ["SUPPLIER_API_BASE_URL"] = "https://upstream.test/api"
os.environ.setdefault("LOG_LEVEL", "WARNING")


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, payload=None, status_code=200, text=None, content_type="application/json",
                 url="https://upstream.test/graphql"):
        self._payload = payload
        self.status_code = status_code
        self.text = text if text is not None else ("" if payload is None else str(payload))
        self.headers = {"Content-Type": content_type}
        self.url = url

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


@pytest.fixture(scope="session", autouse=True)
def _prepare_db():
    from supplier_dashboard.db.session import init_db
    init_db()
    yield


@pytest.fixture(autouse=True)
def _clean_snapshots():
    from supplier_dashboard.db.session import SessionLocal
    from supplier_dashboard.models import PayloadSnapshot
    with SessionLocal() as db:
        db.query(PayloadSnapshot).delete()
        db.commit()
    yield


@pytest.fixture(autouse=True)
def upstream(monkeypatch):
    """
    Replace outbound HTTP. By default every call fails like an unreachable
    host; tests queue responses with upstream.respond(...) or pin one to a
    URL suffix with upstream.route(...) when calls run concurrently.
    """
    class _Upstream:
        def __init__(self):
            self.responses = []
            self.routes = {}
            self.calls = []

        def respond(self, *responses):
            self.responses.extend(responses)

        def route(self, url_suffix, response):
            self.routes[url_suffix] = response

        def _handle(self, method, url, **kwargs):
            self.calls.append({"method": method, "url": url, **kwargs})
            routed = next((r for suffix, r in self.routes.items() if url.endswith(suffix)), None)
            if routed is not None:
                nxt = routed
            elif self.responses:
                nxt = self.responses.pop(0)
            else:
                raise requests.ConnectionError(f"{url} unreachable")
            if isinstance(nxt, Exception):
                raise nxt
            return nxt

    fake = _Upstream()
    monkeypatch.setattr(requests, "post", lambda url, **kw: fake._handle("POST", url, **kw))
    monkeypatch.setattr(requests, "get", lambda url, **kw: fake._handle("GET", url, **kw))
    return fake


@pytest.fixture()
def client():
    from supplier_dashboard.main import app
    return TestClient(app)


@pytest.fixture()
def fake_response():
    return FakeResponse
