"""HTML pages rendered from the Jinja templates in ``portfolio/templates``."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, List, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from .config import TEMPLATE_DIR, SiteProfile
from .jsonld import jsonld_script
from .markdown_processing import render_document
from .posts import Document, PostCollection
from .utils import format_long_date, format_short_date


@lru_cache(maxsize=None)
def environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["long_date"] = format_long_date
    env.filters["short_date"] = format_short_date
    return env


def site_metadata(site: SiteProfile) -> Dict[str, Any]:
    return {
        "title": site.name,
        "description": site.bio_short,
        "canonical": site.url,
    }


def post_metadata(doc: Document, site: SiteProfile) -> Dict[str, Any]:
    """Head tags for a post: canonical URL, Open Graph and Twitter card."""
    page_url = f"{site.base_url}/blog/{doc.slug}"
    image = f"{page_url}/og.png"
    return {
        "title": doc.title,
        "description": doc.description,
        "canonical": page_url,
        "og": {
            "title": doc.title,
            "description": doc.description,
            "url": site.url,
            "image": image,
            "type": "article",
        },
        "twitter": {
            "card": "summary_large_image",
            "title": doc.title,
            "description": doc.description,
            "image": image,
        },
        "published_time": doc.publish_date.isoformat(),
    }


def render_home(
    site: SiteProfile,
    entries: Sequence[Document],
    projects: List[Dict[str, Any]],
) -> str:
    return environment().get_template("home.html").render(
        site=site,
        meta=site_metadata(site),
        entries=entries,
        projects=projects,
    )


def render_post(doc: Document, site: SiteProfile) -> str:
    return environment().get_template("post.html").render(
        site=site,
        meta=post_metadata(doc, site),
        post=doc,
        jsonld=jsonld_script(doc, site),
        content=Markup(render_document(doc)),
    )


def render_post_page(posts: PostCollection, slug: str, site: SiteProfile) -> str:
    """Exact slug lookup; raises PostNotFound for unknown slugs."""
    return render_post(posts.get(slug), site)
