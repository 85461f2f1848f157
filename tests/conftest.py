import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest
import yaml

# Allow tests to import the package from src without installation
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def page(body="Body text.\n", **front):
    """Render a content file with the given front-matter."""
    header = yaml.safe_dump(front, sort_keys=False) if front else ""
    return f"---\n{header}---\n{body}"


class StubResponse:
    def __init__(self, status_code=200, json_data=None, text="", headers=None, url=None):
        self.status_code = status_code
        self._json_data = json_data
        self.text = text
        self.headers = headers or {}
        self.url = url
        self.encoding = None

    def json(self):
        if isinstance(self._json_data, Exception):
            raise self._json_data
        return self._json_data


class StubSession:
    def __init__(self):
        self.request_calls = []
        self.responses = {}
        self.default_response = StubResponse(404, text="not found")
        self.auth = None
        self.mounted = []
        self.closed = False

    def mount(self, prefix, adapter):
        self.mounted.append(prefix)

    def queue_response(self, url, response):
        self.responses[url] = response

    def request(self, method, url, headers=None, verify=None, timeout=None, **kwargs):
        self.request_calls.append(
            {
                "method": method,
                "url": url,
                "headers": headers or {},
                "verify": verify,
                "timeout": timeout,
                "kwargs": kwargs,
            }
        )
        response = self.responses.get(url, self.default_response)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        self.closed = True


class DictSource:
    """In-memory content source."""

    def __init__(self, files):
        self.files = dict(files)

    def paths(self):
        return sorted(self.files)

    def read(self, path):
        value = self.files[path]
        if isinstance(value, Exception):
            raise value
        return value


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def stub_session():
    return StubSession()


@pytest.fixture
def corpus_files():
    """A small corpus shaped like a testing/architecture blog."""
    return {
        "authors/tom.md": page(
            "Tom writes about software architecture.\n",
            name="Tom Hombergs",
            social={"github": "https://github.com/thombergs"},
        ),
        "authors/_index.md": page(title="Authors"),
        "tutorials/junit5/_index.md": page(
            type="tutorial",
            title="JUnit 5 Tutorial",
            members=["tutorials/junit5/assertions", "tutorials/junit5/nested"],
        ),
        "tutorials/junit5/assertions.md": page(
            title="JUnit 5 Assertions", date="2023-03-20", authors=["tom"], tags=["junit"]
        ),
        "tutorials/junit5/nested.md": page(
            title="Nested Tests", date="2023-01-17", authors=["tom"], tags=["junit"]
        ),
        "posts/hexagonal.md": page(
            title="Hexagonal Architecture",
            date="2023-09-23",
            author="tom",
            categories=["Software Craft"],
        ),
        "posts/spring-boot-testing.md": page(
            title="Testing with Spring Boot", date="2023-05-01", authors=["tom"], draft=True
        ),
        "posts/upcoming.md": page(
            title="Upcoming Post", date="2024-06-01", authors=["tom"]
        ),
    }


@pytest.fixture
def content_dir(tmp_path, corpus_files):
    root = tmp_path / "content"
    for rel, text in corpus_files.items():
        target = root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
    return root
