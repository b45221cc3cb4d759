from __future__ import annotations

import json
from typing import Any, Dict

from markupsafe import Markup

from .config import SiteProfile
from .posts import Document
from .utils import slugify


def blog_posting_schema(doc: Document, site: SiteProfile) -> Dict[str, Any]:
    schema: Dict[str, Any] = {
        "@context": "https://schema.org",
        "@type": "BlogPosting",
        "headline": doc.title,
        "description": doc.description,
        "keywords": list(doc.tags),
        "author": {
            "@type": "Person",
            "name": site.name,
            "url": site.url,
        },
        "datePublished": doc.publish_date.isoformat()[:10],
    }
    if doc.description is None:
        del schema["description"]
    return schema


def jsonld_script(doc: Document, site: SiteProfile) -> Markup:
    payload = json.dumps(blog_posting_schema(doc, site), ensure_ascii=False)
    # keep "</script>" inside string values from closing the tag
    payload = payload.replace("</", "<\\/")
    return Markup(
        f'<script id="jsonld-{slugify(doc.title)}" type="application/ld+json">'
        f"{payload}</script>"
    )
