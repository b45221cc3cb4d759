from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx

from .config import SiteProfile
from .stars import fetch_project_stars, repo_key


def make_project_cards(
    site: SiteProfile,
    stars: Optional[Mapping[Tuple[str, str], Optional[int]]] = None,
) -> List[Dict[str, Any]]:
    """
    Cards for the home page project grid.

    Projects whose URL was already listed are dropped; `stars` is None when
    the count is unknown or zero, which hides the badge.
    """
    stars = stars or {}
    seen = set()
    cards: List[Dict[str, Any]] = []
    for project in site.projects:
        if project.url in seen:
            continue
        seen.add(project.url)
        cards.append(
            {
                "title": project.title,
                "url": project.url,
                "description": project.description,
                "stars": (
                    stars.get(repo_key(project, site.github_owner))
                    if project.repo
                    else None
                ),
            }
        )
    return cards


async def load_project_cards(
    site: SiteProfile,
    client: httpx.AsyncClient | None = None,
    with_stars: bool = True,
) -> List[Dict[str, Any]]:
    stars = (
        await fetch_project_stars(site.projects, site.github_owner, client)
        if with_stars
        else {}
    )
    return make_project_cards(site, stars)
