"""RSS 2.0 feed for published posts."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from datetime import date, datetime, time, timezone
from email.utils import format_datetime
from typing import Callable, Iterable, Optional

import nh3

from .config import (
    FEED_ALLOWED_ATTRIBUTES,
    FEED_ALLOWED_TAGS,
    FEED_URL_SCHEMES,
    SiteProfile,
)
from .markdown_processing import render_document
from .posts import Document

logger = logging.getLogger(__name__)

CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"
ATOM_NS = "http://www.w3.org/2005/Atom"
RSS_MEDIA_TYPE = "application/rss+xml; charset=utf-8"

ET.register_namespace("content", CONTENT_NS)
ET.register_namespace("atom", ATOM_NS)


def sanitize_html(html: str) -> str:
    """Keep a conservative set of tags plus images; drop scripts entirely."""
    return nh3.clean(
        html,
        tags=FEED_ALLOWED_TAGS,
        attributes=FEED_ALLOWED_ATTRIBUTES,
        url_schemes=FEED_URL_SCHEMES,
        clean_content_tags={"script", "style"},
    )


def rfc822(d: date | datetime) -> str:
    if not isinstance(d, datetime):
        d = datetime.combine(d, time(), tzinfo=timezone.utc)
    return format_datetime(d, usegmt=True)


def post_url(site: SiteProfile, doc: Document) -> str:
    return f"{site.base_url}/blog/{doc.slug}"


def _text(parent: ET.Element, tag: str, value: str) -> ET.Element:
    el = ET.SubElement(parent, tag)
    el.text = value
    return el


def build_feed(
    site: SiteProfile,
    documents: Iterable[Document],
    render: Callable[[Document], str] = render_document,
    now: Optional[datetime] = None,
) -> bytes:
    """Serialize non-draft documents as RSS; failing items are skipped."""
    now = now or datetime.now(timezone.utc)

    rss = ET.Element("rss", {"version": "2.0"})
    channel = ET.SubElement(rss, "channel")
    _text(channel, "title", site.url)
    _text(channel, "description", site.description)
    _text(channel, "link", site.url)
    ET.SubElement(
        channel,
        f"{{{ATOM_NS}}}link",
        {
            "href": f"{site.base_url}/api/rss",
            "rel": "self",
            "type": "application/rss+xml",
        },
    )
    _text(channel, "language", "en-us")
    _text(channel, "lastBuildDate", rfc822(now))

    for doc in documents:
        if doc.draft:
            continue
        try:
            content = sanitize_html(render(doc))
        except Exception:
            logger.exception("skipping feed item %s: render failed", doc.slug)
            continue

        link = post_url(site, doc)
        item = ET.SubElement(channel, "item")
        _text(item, "title", doc.title)
        _text(item, "description", doc.description or "")
        _text(item, "link", link)
        _text(item, "guid", link).set("isPermaLink", "true")
        _text(item, "pubDate", rfc822(doc.publish_date))
        _text(item, f"{{{CONTENT_NS}}}encoded", content)

    ET.indent(rss)
    return ET.tostring(rss, encoding="utf-8", xml_declaration=True)
