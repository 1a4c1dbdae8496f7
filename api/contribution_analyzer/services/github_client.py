"""GitHub API client.

REST wrapper with:
- optional token auth (GITHUB_TOKEN, GH_TOKEN)
- rate-limit handling (fail fast by default; optionally sleep until reset)
- ETag conditional requests backed by a bounded LRU response cache
"""

from __future__ import annotations

import logging
import os
import time
from collections import OrderedDict
from typing import Any, Optional

import httpx

from contribution_analyzer.services.scoring_config import env_flag

DEFAULT_BASE_URL = "https://api.github.com"
DEFAULT_RESPONSE_CACHE_MAX_ENTRIES = 512
log = logging.getLogger(__name__)


class GitHubClientError(Exception):
    """Base for upstream failures. ``status_code`` is None when GitHub never answered."""

    status_code: Optional[int] = None


class GitHubAPIError(GitHubClientError):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitHubUnavailableError(GitHubClientError):
    pass


def _timeout_from_env(default: float = 20.0) -> float:
    raw = os.getenv("GITHUB_TIMEOUT_SECONDS", "").strip()
    try:
        return max(1.0, float(raw)) if raw else default
    except ValueError:
        return default


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    try:
        return max(1, int(raw)) if raw else default
    except ValueError:
        return default


class GitHubClient:
    def __init__(
        self,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        user_agent: str = "contribution-analyzer",
        timeout: Optional[float] = None,
        wait_on_rate_limit: Optional[bool] = None,
        response_cache_max_entries: Optional[int] = None,
    ) -> None:
        env_token = os.getenv("GITHUB_TOKEN")
        if not env_token:
            env_token = os.getenv("GH_TOKEN")
        if env_token:
            env_token = env_token.strip() or None
        self._token = token or env_token
        self._base_url = (base_url or os.getenv("GITHUB_API_URL") or DEFAULT_BASE_URL).rstrip("/")
        self._timeout = timeout if timeout is not None else _timeout_from_env()
        self._wait_on_rate_limit = (
            wait_on_rate_limit if wait_on_rate_limit is not None else env_flag("GITHUB_WAIT_ON_RATE_LIMIT")
        )
        self._headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": user_agent,
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            self._headers["Authorization"] = f"Bearer {self._token}"

        # LRU of url -> (etag, payload); 304 replies do not count against the rate limit.
        self._response_cache: OrderedDict[str, tuple[str, Any]] = OrderedDict()
        self._response_cache_max = (
            response_cache_max_entries
            if response_cache_max_entries is not None
            else _int_from_env("GITHUB_RESPONSE_CACHE_MAX_ENTRIES", DEFAULT_RESPONSE_CACHE_MAX_ENTRIES)
        )

    @property
    def response_cache_size(self) -> int:
        return len(self._response_cache)

    def _cached_response(self, url: str) -> Optional[tuple[str, Any]]:
        entry = self._response_cache.get(url)
        if entry is not None:
            self._response_cache.move_to_end(url)
        return entry

    def _store_response(self, url: str, etag: str, data: Any) -> None:
        if url in self._response_cache:
            self._response_cache.move_to_end(url)
        self._response_cache[url] = (etag, data)
        while len(self._response_cache) > self._response_cache_max:
            evicted_url, _ = self._response_cache.popitem(last=False)
            log.debug("github_response_cache_evict url=%s", evicted_url)

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    @staticmethod
    def _rate_limit_exhausted(r: httpx.Response) -> bool:
        return r.headers.get("X-RateLimit-Remaining") == "0"

    def _sleep_for_rate_limit_if_needed(self, r: httpx.Response) -> None:
        remaining = r.headers.get("X-RateLimit-Remaining")
        reset = r.headers.get("X-RateLimit-Reset")
        try:
            rem_i = int(remaining) if remaining is not None else None
            reset_i = int(reset) if reset is not None else None
        except ValueError:
            rem_i, reset_i = None, None

        if rem_i == 0 and reset_i:
            now = int(time.time())
            delay = max(0, reset_i - now) + 1
            log.warning("github_rate_limit_sleep delay_s=%s", delay)
            time.sleep(delay)

    def _send(self, method: str, url: str, headers: dict[str, str]) -> httpx.Response:
        try:
            with httpx.Client(timeout=self._timeout, headers=headers) as client:
                return client.request(method, url)
        except httpx.HTTPError as exc:
            log.warning("github_request_failed method=%s url=%s error=%s", method, url, exc)
            raise GitHubUnavailableError(f"GitHub API unreachable for {url}: {exc}") from exc

    def _request(self, method: str, url: str, headers: dict[str, str] | None = None) -> httpx.Response:
        h = dict(self._headers)
        if headers:
            h.update(headers)
        r = self._send(method, url, h)

        if r.status_code in (403, 429) and self._rate_limit_exhausted(r):
            if not self._wait_on_rate_limit:
                reset = r.headers.get("X-RateLimit-Reset", "unknown")
                raise GitHubAPIError(r.status_code, f"GitHub API rate limit exhausted for {url} (reset={reset})")
            # Back off until reset then retry once.
            self._sleep_for_rate_limit_if_needed(r)
            r = self._send(method, url, h)
        elif self._wait_on_rate_limit:
            self._sleep_for_rate_limit_if_needed(r)
        return r

    def get_json(self, path: str, use_cache: bool = True) -> Any:
        """GET JSON for a path or full URL.

        With ``use_cache`` the response is kept in a bounded LRU keyed by URL and
        later requests send ``If-None-Match``. URLs that never repeat, such as
        commit lists with a moving ``since`` cutoff, should pass ``use_cache=False``.
        """
        url = path if path.startswith("http") else f"{self._base_url}{path}"

        extra_headers: dict[str, str] = {}
        cached = self._cached_response(url) if use_cache else None
        if cached is not None:
            extra_headers["If-None-Match"] = cached[0]

        r = self._request("GET", url, headers=extra_headers)

        if r.status_code == 304:
            if cached is not None:
                return cached[1]
            # No stored payload to revalidate; retry without condition.
            r = self._request("GET", url, headers={})

        if r.status_code >= 400:
            raise GitHubAPIError(r.status_code, f"GitHub API error {r.status_code} for {url}: {r.text[:200]}")

        data = r.json()
        new_etag = r.headers.get("ETag")
        if use_cache and new_etag:
            self._store_response(url, new_etag, data)
        return data

    def list_contributors(self, owner: str, repo: str, per_page: int = 100, max_pages: int = 1) -> list[dict]:
        """List contributors. Caps pages to avoid runaway API usage."""
        out: list[dict] = []
        for page in range(1, max_pages + 1):
            data = self.get_json(
                f"/repos/{owner}/{repo}/contributors?per_page={per_page}&page={page}&anon=false"
            )
            if not isinstance(data, list):
                break
            out.extend(data)
            if len(data) < per_page:
                break
        return out

    def list_commits(
        self,
        owner: str,
        repo: str,
        since_iso_utc: Optional[str] = None,
        per_page: int = 100,
        limit: Optional[int] = None,
        max_pages: Optional[int] = None,
    ) -> list[dict]:
        """List commits (newest first), optionally since ISO-8601 UTC (e.g., 2026-02-01T00:00:00Z).

        Stops when ``limit`` items are accumulated, ``max_pages`` pages were read,
        or a page is empty, not a list, or shorter than ``per_page``. The result may
        exceed ``limit`` by up to one page; callers truncate.
        """
        since_q = f"since={since_iso_utc}&" if since_iso_utc else ""
        out: list[dict] = []
        page = 1
        while limit is None or len(out) < limit:
            if max_pages is not None and page > max_pages:
                break
            data = self.get_json(
                f"/repos/{owner}/{repo}/commits?{since_q}per_page={per_page}&page={page}",
                use_cache=not since_iso_utc,
            )
            if not isinstance(data, list) or not data:
                break
            out.extend(data)
            if len(data) < per_page:
                break
            page += 1
        return out

    def get_commit(self, owner: str, repo: str, sha: str) -> dict:
        """Single commit with ``stats`` (additions/deletions) and ``files``."""
        data = self.get_json(f"/repos/{owner}/{repo}/commits/{sha}")
        return data if isinstance(data, dict) else {}
