import asyncio
import logging

import aiohttp

from git_graph_data import Commit, CommitPage, CommitSourceError


class GraphApiClient:
    """Commit source backed by the `/api/git/graph` HTTP endpoint.

    The endpoint answers `{"data": {"commits": [...], "hasMore": bool}}` and
    `{"error": "..."}` on failure.
    """

    def __init__(self, base_url: str, repo_path: str, timeout: float = 15):
        self.base_url = base_url.rstrip("/")
        self.repo_path = repo_path
        self.timeout = timeout

    async def fetch_page(self, limit: int, offset: int) -> CommitPage:
        url = f"{self.base_url}/api/git/graph"
        params = {"path": self.repo_path, "limit": str(limit), "skip": str(offset)}
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        try:
            async with (
                aiohttp.ClientSession(timeout=timeout) as session,
                session.get(url, params=params) as response,
            ):
                if response.status != 200:
                    raise CommitSourceError(await self._error_message(response))
                payload = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise CommitSourceError(f"Graph request timed out ({self.timeout}s)") from e
        except aiohttp.ClientError as e:
            raise CommitSourceError(f"Graph request failed: {e!s}") from e

        data = (payload or {}).get("data") or {}
        commits = tuple(Commit.from_dict(item) for item in data.get("commits") or [])
        logging.debug("GraphApiClient: %d commits from %s (skip=%d)", len(commits), url, offset)
        return CommitPage(commits=commits, has_more=bool(data.get("hasMore", False)))

    @staticmethod
    async def _error_message(response: aiohttp.ClientResponse) -> str:
        try:
            body = await response.json(content_type=None)
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            return body["error"]
        return f"Failed to fetch graph: {response.status}"
