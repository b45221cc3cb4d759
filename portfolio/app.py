"""FastAPI application serving the site."""

from __future__ import annotations

import logging
from typing import Callable, Optional

import httpx
from fastapi import FastAPI, HTTPException, status
from fastapi.responses import HTMLResponse, Response

from .config import (
    GITHUB_TIMEOUT,
    SiteProfile,
    content_dir,
    is_production,
    load_site_profile,
)
from .errors import PostNotFound
from .feed import RSS_MEDIA_TYPE, build_feed
from .og import render_og_image
from .pages import render_home, render_post_page
from .posts import PostCollection
from .projects import load_project_cards

logger = logging.getLogger(__name__)


def create_app(
    posts: Optional[PostCollection] = None,
    site: Optional[SiteProfile] = None,
    http_client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
) -> FastAPI:
    """Build the app; content is loaded once here and never reloaded."""
    site = site or load_site_profile()
    if posts is None:
        posts = PostCollection.from_directory(content_dir())
    client_factory = http_client_factory or (lambda: httpx.AsyncClient(timeout=GITHUB_TIMEOUT))

    app = FastAPI(title=site.name, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.posts = posts
    app.state.site = site

    def _lookup_or_404(slug: str):
        try:
            return posts.get(slug)
        except PostNotFound as exc:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Not found") from exc

    @app.get("/", response_class=HTMLResponse)
    async def home() -> HTMLResponse:
        entries = posts.listing(production=is_production())
        async with client_factory() as client:
            projects = await load_project_cards(site, client)
        return HTMLResponse(render_home(site, entries, projects))

    # rendering routes are plain functions so they run in the threadpool
    @app.get("/api/rss")
    def rss() -> Response:
        return Response(build_feed(site, posts.published()), media_type=RSS_MEDIA_TYPE)

    # registered before the page route so the greedy slug does not swallow it
    @app.get("/blog/{slug:path}/og.png")
    def og_image(slug: str) -> Response:
        post = _lookup_or_404(slug)
        return Response(render_og_image(post.title, site), media_type="image/png")

    @app.get("/blog/{slug:path}", response_class=HTMLResponse)
    def blog_post(slug: str) -> HTMLResponse:
        try:
            html = render_post_page(posts, slug, site)
        except PostNotFound as exc:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Not found") from exc
        return HTMLResponse(html)

    logger.info("serving %d posts for %s", len(posts), site.url)
    return app
