"""GitHub Contents API client — a repository used as a JSON file store.

Writes are check-then-write: fetch the current blob SHA, then PUT the new
content carrying that SHA so GitHub overwrites the version we saw. A path
with no prior version is created by omitting the SHA.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from app.fitness.errors import StorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RemoteFile:
    path: str
    sha: str
    content: bytes


class GitHubContentsClient:
    def __init__(
        self,
        token: str,
        repo: str,
        *,
        branch: str | None = None,
        api_url: str = "https://api.github.com",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.repo = repo
        self.branch = branch
        self._client = httpx.AsyncClient(
            base_url=api_url.rstrip("/"),
            headers={
                "Authorization": f"token {token}",
                "Accept": "application/vnd.github+json",
            },
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def _url(self, path: str) -> str:
        return f"/repos/{self.repo}/contents/{path.strip('/')}"

    def _params(self) -> dict[str, str]:
        return {"ref": self.branch} if self.branch else {}

    async def _get(self, path: str) -> Any | None:
        """GET a contents path; None on 404."""
        try:
            resp = await self._client.get(self._url(path), params=self._params())
        except httpx.HTTPError as exc:
            raise StorageError(f"GitHub request failed for {path}: {exc}") from exc
        if resp.status_code == 404:
            return None
        if resp.status_code != 200:
            raise StorageError(f"GitHub GET {path} failed: {resp.status_code}", resp.status_code)
        return resp.json()

    async def get_sha(self, path: str) -> str | None:
        data = await self._get(path)
        if isinstance(data, dict):
            sha = data.get("sha")
            if isinstance(sha, str):
                return sha
        return None

    async def get_file(self, path: str) -> RemoteFile | None:
        data = await self._get(path)
        if not isinstance(data, dict) or data.get("type", "file") != "file":
            return None
        raw = data.get("content") or ""
        try:
            content = base64.b64decode(raw)
        except ValueError as exc:
            raise StorageError(f"Undecodable content at {path}") from exc
        return RemoteFile(path=data.get("path", path), sha=data.get("sha", ""), content=content)

    async def list_dir(self, path: str) -> list[dict[str, Any]]:
        """Directory entries (name, path, type); empty list if the path is missing."""
        data = await self._get(path)
        if not isinstance(data, list):
            return []
        return data

    async def put_file(self, path: str, content: bytes, message: str | None = None) -> None:
        sha = await self.get_sha(path)
        payload: dict[str, Any] = {
            "message": message or f"Update {path}",
            "content": base64.b64encode(content).decode("ascii"),
        }
        if sha:
            payload["sha"] = sha
        if self.branch:
            payload["branch"] = self.branch

        logger.info("GitHub API Request: PUT %s", self._url(path))
        try:
            resp = await self._client.put(self._url(path), json=payload)
        except httpx.HTTPError as exc:
            raise StorageError(f"GitHub request failed for {path}: {exc}") from exc
        if resp.status_code not in (200, 201):
            raise StorageError(f"GitHub PUT {path} failed: {resp.status_code}", resp.status_code)
        logger.info("Updated GitHub: %s", path)
