"""
A compact, robust HTTP source for corpora published on a static host.

The host serves the content files as-is plus a JSON manifest listing them:

    GET <base_url>/manifest.json   → ["posts/hexagonal.md", "authors/tom.md", ...]
    GET <base_url>/posts/hexagonal.md
"""

import logging
import urllib.parse
from dataclasses import dataclass
from typing import Any, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .exceptions import raise_for_source_error

logger = logging.getLogger(__name__)


# -------------------------------
# Credentials Model
# -------------------------------


@dataclass
class Credentials:
    """
    Either a bearer token OR basic-auth credentials (username & password).
    They are mutually exclusive; a public host needs neither.
    """
    token: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    def __post_init__(self) -> None:
        has_basic = bool(self.username or self.password)

        if self.token and has_basic:
            raise ValueError("Provide either token OR username/password, not both.")

        if has_basic and not (self.username and self.password):
            raise ValueError("Basic auth needs both username and password.")

    @property
    def is_token(self) -> bool:
        return bool(self.token)

    @property
    def is_basic(self) -> bool:
        return bool(self.username and self.password)


# -------------------------------
# Remote Source
# -------------------------------


class RemoteSource:
    """
    Content source backed by HTTP.

    Args:
        base_url: URL the content tree is published under
        credentials: optional Credentials for private hosts
        manifest: path of the JSON manifest, relative to base_url
        verify_tls: whether to verify TLS certificates
        default_timeout: request timeout in seconds
        pool_connections / pool_maxsize: connection pool sizing

    Example:
        >>> source = RemoteSource("https://example.org/content")
        >>> report = build(source, now=datetime.now(timezone.utc))
    """

    def __init__(
        self,
        base_url: str,
        credentials: Optional[Credentials] = None,
        *,
        manifest: str = "manifest.json",
        verify_tls: bool = True,
        default_timeout: float = 30.0,
        pool_connections: int = 3,
        pool_maxsize: int = 10,
    ) -> None:

        self.base_url = base_url.rstrip("/")
        self.manifest = manifest
        self.credentials = credentials
        self.verify_tls = verify_tls
        self.default_timeout = default_timeout

        self._session = requests.Session()

        # Configure connection pooling
        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
        )
        adapter = HTTPAdapter(
            pool_connections=pool_connections,
            pool_maxsize=pool_maxsize,
            max_retries=retry_strategy,
        )
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

        if credentials is not None and credentials.is_basic:
            self._session.auth = (credentials.username, credentials.password)

    # ------------------------------------------------------------------
    # URL helpers
    # ------------------------------------------------------------------

    def _join(self, base: str, path: str) -> str:
        """Join base and path cleanly without stripping segments."""
        return urllib.parse.urljoin(base.rstrip("/") + "/", path.lstrip("/"))

    def url(self, path: str) -> str:
        """Absolute URL of a content path (each segment percent-encoded)."""
        return self._join(self.base_url, urllib.parse.quote(path))

    # ------------------------------------------------------------------
    # Low-level request
    # ------------------------------------------------------------------

    def request(self, method: str, path: str, *, timeout=None, headers=None, **kwargs) -> requests.Response:
        url = self.url(path)

        req_headers = {}
        if self.credentials is not None and self.credentials.is_token:
            req_headers["Authorization"] = f"Bearer {self.credentials.token}"
        if headers:
            req_headers.update(
                {k: v for k, v in headers.items() if k.lower() != "authorization"}
            )

        logger.debug("%s %s", method.upper(), url)
        resp = self._session.request(
            method.upper(),
            url,
            headers=req_headers,
            verify=self.verify_tls,
            timeout=self.default_timeout if timeout is None else timeout,
            **kwargs,
        )
        raise_for_source_error(resp)

        return resp

    def get(self, path: str, **params: Any) -> requests.Response:
        return self.request("GET", path, params=params or None)

    # ------------------------------------------------------------------
    # Source interface
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_manifest(payload: Any) -> List[str]:
        """
        Normalize manifest responses into a list of paths.

        Accepted shapes:
          - ["posts/a.md", ...]
          - {"result": ["posts/a.md", ...]}
          - {"result": [{"path": "posts/a.md"}, ...]} (or the bare list)
        """
        result = payload.get("result", payload) if isinstance(payload, dict) else payload

        if isinstance(result, list) and all(isinstance(item, str) for item in result):
            return sorted(p.lstrip("/") for p in result)
        if isinstance(result, list) and all(isinstance(item, dict) and "path" in item for item in result):
            return sorted(item["path"].lstrip("/") for item in result)

        raise ValueError(f"Unexpected manifest format: {result!r}")

    def paths(self) -> List[str]:
        return self._parse_manifest(self.get(self.manifest).json())

    def read(self, path: str) -> str:
        resp = self.get(path)
        # text/* without a charset would otherwise decode as ISO-8859-1
        if "charset" not in resp.headers.get("Content-Type", "").lower():
            resp.encoding = "utf-8"
        return resp.text

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "RemoteSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<RemoteSource base_url='{self.base_url}'>"
