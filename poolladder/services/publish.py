"""
Publish the ladder data files to a GitHub repository as one commit, using
the git data API (ref -> commit -> blobs -> tree -> commit -> ref).
"""
from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from datetime import datetime

import httpx

from poolladder.core.config import Settings
from poolladder.core.security import now_utc
from poolladder.services.errors import PublishError
from poolladder.services.ladder import LadderSnapshot
from poolladder.services.records import snapshot_to_records

logger = logging.getLogger(__name__)

DATA_PATHS = {
    "players": "data/players.json",
    "matches": "data/matches.json",
    "meta": "data/meta.json",
}
COMMIT_FOOTER = "Published via admin panel"


@dataclass
class PublishResult:
    sha: str
    message: str
    url: str
    committed_at: datetime


def _encode(payload) -> str:
    return base64.b64encode(json.dumps(payload, indent=2).encode("utf-8")).decode("ascii")


class GitHubPublisher:
    def __init__(self, token: str, owner: str, repo: str, branch: str = "main",
                 api_url: str = "https://api.github.com", client: httpx.Client | None = None,
                 timeout: float = 20):
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self._client = client or httpx.Client(
            base_url=api_url,
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
            },
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "GitHubPublisher":
        if not (settings.GITHUB_TOKEN and settings.GITHUB_OWNER and settings.GITHUB_REPO):
            raise PublishError("Publishing is not configured (GITHUB_TOKEN/GITHUB_OWNER/GITHUB_REPO)")
        return cls(
            token=settings.GITHUB_TOKEN,
            owner=settings.GITHUB_OWNER,
            repo=settings.GITHUB_REPO,
            branch=settings.GITHUB_BRANCH,
            api_url=settings.GITHUB_API_URL,
            timeout=settings.GITHUB_TIMEOUT_SECONDS,
        )

    def _call(self, method: str, path: str, body: dict | None = None) -> dict:
        url = f"/repos/{self.owner}/{self.repo}/git/{path}"
        try:
            resp = self._client.request(method, url, json=body)
        except httpx.HTTPError as exc:
            raise PublishError(f"GitHub request failed: {exc}") from exc
        if resp.status_code >= 400:
            raise PublishError(f"GitHub {method} {path} returned {resp.status_code}: {resp.text}", resp.status_code)
        return resp.json()

    def publish(self, snapshot: LadderSnapshot, message: str) -> PublishResult:
        players, matches, meta = snapshot_to_records(snapshot)
        logger.info("Publishing to %s/%s@%s", self.owner, self.repo, self.branch)

        ref = self._call("GET", f"ref/heads/{self.branch}")
        head_sha = ref["object"]["sha"]
        head = self._call("GET", f"commits/{head_sha}")

        tree = []
        for key, payload in (("players", players), ("matches", matches), ("meta", meta)):
            blob = self._call("POST", "blobs", {"content": _encode(payload), "encoding": "base64"})
            tree.append({"path": DATA_PATHS[key], "mode": "100644", "type": "blob", "sha": blob["sha"]})

        new_tree = self._call("POST", "trees", {"base_tree": head["tree"]["sha"], "tree": tree})
        commit = self._call("POST", "commits", {
            "message": f"{message}\n\n{COMMIT_FOOTER}",
            "tree": new_tree["sha"],
            "parents": [head_sha],
        })
        self._call("PATCH", f"refs/heads/{self.branch}", {"sha": commit["sha"]})

        logger.info("Published commit %s", commit["sha"])
        return PublishResult(
            sha=commit["sha"],
            message=message,
            url=f"https://github.com/{self.owner}/{self.repo}/commit/{commit['sha']}",
            committed_at=now_utc(),
        )
