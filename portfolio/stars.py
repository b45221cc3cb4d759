"""GitHub stargazer counts for the project list."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, Optional, Tuple

import httpx

from .config import GITHUB_API, GITHUB_TIMEOUT, Project

logger = logging.getLogger(__name__)


def repo_key(project: Project, default_owner: str) -> Tuple[str, str]:
    return (project.owner or default_owner, project.repo)


async def fetch_stargazers_count(
    owner: str,
    repo: str,
    client: httpx.AsyncClient,
) -> Optional[int]:
    """Return the star count, or None when unavailable or zero.

    Failures are logged and never raised: the widget simply renders nothing.
    """
    url = f"{GITHUB_API}/repos/{owner}/{repo}"
    try:
        response = await client.get(url, headers={"Accept": "application/vnd.github+json"})
        response.raise_for_status()
        count = response.json().get("stargazers_count")
    except (httpx.HTTPError, ValueError, AttributeError) as exc:
        logger.warning("stargazers lookup failed for %s/%s: %s", owner, repo, exc)
        return None
    if not count or not isinstance(count, int) or isinstance(count, bool):
        return None
    return count


async def fetch_project_stars(
    projects: Iterable[Project],
    default_owner: str,
    client: httpx.AsyncClient | None = None,
) -> Dict[Tuple[str, str], Optional[int]]:
    """Fetch counts for every project with a repo, keyed by `(owner, repo)`."""
    keys = list(dict.fromkeys(
        repo_key(p, default_owner) for p in projects if p.repo
    ))
    if not keys:
        return {}

    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=GITHUB_TIMEOUT)
    try:
        counts = await asyncio.gather(
            *(
                fetch_stargazers_count(owner, repo, client)
                for owner, repo in keys
            )
        )
    finally:
        if owns_client:
            await client.aclose()
    return dict(zip(keys, counts))
