"""Tests for the contributor scoring and GitHub passthrough routes.

Contract:
- GET /api/stats/{owner}/{repo} returns score rows sorted by score, full breakdown map.
- GET /api/stats/{owner}/{repo}/summary returns the feature/bugfix projection.
- Upstream failures surface the GitHub status (500 when GitHub never answered)
  with a single top-level "detail" string.
"""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio
import respx
from httpx import ASGITransport, AsyncClient, Response

from conftest import commit_payload, detail_payload
from contribution_analyzer.adapters.result_cache import InMemoryResultCache
from contribution_analyzer.main import app
from contribution_analyzer.services.contribution_stats_service import ContributionStatsService
from contribution_analyzer.services.github_client import GitHubClient
from contribution_analyzer.services.scoring_config import ScoringConfig

GITHUB = "https://api.github.com"


@pytest.fixture(autouse=True)
def _fresh_app_state():
    client = GitHubClient(token="", wait_on_rate_limit=False)
    config = ScoringConfig()
    app.state.github_client = client
    app.state.stats_service = ContributionStatsService(
        source=client,
        cache=InMemoryResultCache(default_ttl_seconds=config.cache_ttl_seconds),
        config=config,
    )
    yield


@pytest_asyncio.fixture
async def client():
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def _mock_repo(gh: respx.MockRouter) -> respx.Route:
    list_route = gh.get("/repos/foo/bar/commits").mock(
        return_value=Response(
            200,
            json=[
                commit_payload("c1", "feat: add export", login="alice"),
                commit_payload("c2", "chore: bump deps", login="alice"),
                commit_payload("c3", "fix: crash (#12)", login="bob"),
            ],
        )
    )
    gh.get("/repos/foo/bar/commits/c1").mock(return_value=Response(200, json=detail_payload(16, 0, ["src/export.js"])))
    gh.get("/repos/foo/bar/commits/c2").mock(return_value=Response(200, json=detail_payload(0, 0, ["package.json"])))
    gh.get("/repos/foo/bar/commits/c3").mock(return_value=Response(200, json=detail_payload(1, 0, ["src/a.js"])))
    return list_route


@pytest.mark.asyncio
async def test_stats_returns_ranked_rows_with_breakdown(client: AsyncClient):
    with respx.mock(base_url=GITHUB) as gh:
        _mock_repo(gh)
        response = await client.get("/api/stats/foo/bar", params={"sinceDays": 30, "maxCommits": 50})

    assert response.status_code == 200
    data = response.json()
    assert [row["username"] for row in data] == ["alice", "bob"]
    alice = data[0]
    assert set(alice.keys()) == {"username", "avatar", "commits", "additions", "deletions", "breakdown", "score"}
    assert alice["commits"] == 2
    assert alice["breakdown"]["feature"] == 1
    assert alice["breakdown"]["chore"] == 1
    assert sum(alice["breakdown"].values()) == 2
    # feature: 5 + sqrt(16) * 2 + 4 = 17; chore: 5 + 0 + 0.5 = 5.5
    assert alice["score"] == 22.5
    # bugfix: 5 + 2 + 3 + 1 (issue ref)
    assert data[1]["score"] == 11.0


@pytest.mark.asyncio
async def test_stats_second_identical_request_hits_cache(client: AsyncClient):
    with respx.mock(base_url=GITHUB) as gh:
        list_route = _mock_repo(gh)
        first = await client.get("/api/stats/foo/bar", params={"sinceDays": 30, "maxCommits": 50})
        second = await client.get("/api/stats/foo/bar", params={"sinceDays": 30, "maxCommits": 50})
        summary = await client.get("/api/stats/foo/bar/summary", params={"sinceDays": 30, "maxCommits": 50})

    assert first.content == second.content
    assert summary.status_code == 200
    assert len(list_route.calls) == 1


@pytest.mark.asyncio
async def test_stats_summary_projection(client: AsyncClient):
    with respx.mock(base_url=GITHUB) as gh:
        _mock_repo(gh)
        response = await client.get("/api/stats/foo/bar/summary")

    assert response.status_code == 200
    rows = {row["username"]: row for row in response.json()}
    assert rows["alice"]["features"] == 1
    assert rows["alice"]["bugfixes"] == 0
    assert rows["bob"]["bugfixes"] == 1
    assert "breakdown" not in rows["alice"]


@pytest.mark.asyncio
async def test_stats_empty_window_returns_empty_list(client: AsyncClient):
    with respx.mock(base_url=GITHUB) as gh:
        gh.get("/repos/foo/bar/commits").mock(return_value=Response(200, json=[]))
        response = await client.get("/api/stats/foo/bar")

    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_stats_surfaces_upstream_status(client: AsyncClient):
    with respx.mock(base_url=GITHUB) as gh:
        gh.get("/repos/foo/missing/commits").mock(return_value=Response(404, json={"message": "Not Found"}))
        response = await client.get("/api/stats/foo/missing")

    assert response.status_code == 404
    body = response.json()
    assert list(body.keys()) == ["detail"]
    assert "404" in body["detail"]


@pytest.mark.asyncio
async def test_stats_network_failure_is_500(client: AsyncClient):
    with respx.mock(base_url=GITHUB) as gh:
        gh.get("/repos/foo/bar/commits").mock(side_effect=httpx.ConnectError("dns failure"))
        response = await client.get("/api/stats/foo/bar")

    assert response.status_code == 500
    assert "unreachable" in response.json()["detail"]


@pytest.mark.asyncio
async def test_stats_rejects_non_positive_query_values(client: AsyncClient):
    response = await client.get("/api/stats/foo/bar", params={"maxCommits": 0})

    assert response.status_code == 422
    assert isinstance(response.json()["detail"], list)


@pytest.mark.asyncio
async def test_commits_passthrough(client: AsyncClient):
    with respx.mock(base_url=GITHUB) as gh:
        route = gh.get("/repos/foo/bar/commits").mock(
            return_value=Response(200, json=[{"sha": "c1"}, {"sha": "c2"}])
        )
        response = await client.get("/api/commits/foo/bar")

    assert response.status_code == 200
    assert response.json() == [{"sha": "c1"}, {"sha": "c2"}]
    assert route.calls[0].request.url.params["per_page"] == "100"


@pytest.mark.asyncio
async def test_contributors_passthrough_error(client: AsyncClient):
    with respx.mock(base_url=GITHUB) as gh:
        gh.get("/repos/foo/bar/contributors").mock(return_value=Response(404, json={"message": "Not Found"}))
        response = await client.get("/api/contributors/foo/bar")

    assert response.status_code == 404
    assert list(response.json().keys()) == ["detail"]
