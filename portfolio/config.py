from __future__ import annotations

import os
import pathlib
import re
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

# ---------- Paths

# This assumes config.py sits in portfolio/ at the repo root.
ROOT = pathlib.Path(__file__).resolve().parents[1]
CONTENT_DIR = ROOT / "content"
SITE_CONFIG = ROOT / "site.yml"
TEMPLATE_DIR = pathlib.Path(__file__).resolve().parent / "templates"
BUILD_OUT = ROOT / "public"

# ---------- Content

FILE_PATTERN = "blog/**/*.mdx"
SLUG_PREFIX = "blog/"
CODE_THEME = "github-dark"

# JSX components allowed in MDX bodies and the HTML tag they render as
MDX_COMPONENTS = {"Image": "img"}

# ---------- Open Graph image

OG_SIZE = (1200, 600)
OG_BACKGROUND = "#121212"
OG_GRADIENT_END = "#1a1a1a"
OG_TITLE_COLOR = "#f5f5f5"
OG_BRAND_COLOR = "#9ca3af"
OG_SEPARATOR_COLOR = "#6b7280"
OG_TITLE_SIZE = 54
OG_BRAND_SIZE = 20
OG_GRID_STEP = 100

# ---------- Outbound

GITHUB_API = "https://api.github.com"
GITHUB_TIMEOUT = 5.0

# ---------- Feed sanitizer

FEED_ALLOWED_TAGS = {
    "address", "article", "aside", "footer", "header",
    "h1", "h2", "h3", "h4", "h5", "h6", "hgroup",
    "main", "nav", "section",
    "blockquote", "dd", "div", "dl", "dt", "figcaption", "figure",
    "hr", "li", "ol", "p", "pre", "ul",
    "a", "abbr", "b", "bdi", "bdo", "br", "cite", "code", "data", "dfn",
    "em", "i", "kbd", "mark", "q", "rb", "rp", "rt", "rtc", "ruby", "s",
    "samp", "small", "span", "strong", "sub", "sup", "time", "u", "var",
    "wbr", "caption", "col", "colgroup", "table", "tbody", "td", "tfoot",
    "th", "thead", "tr",
    "img",
}
FEED_ALLOWED_ATTRIBUTES = {
    "a": {"href", "name", "target"},
    "img": {"src", "srcset", "alt", "title", "width", "height", "loading"},
}
FEED_URL_SCHEMES = {"http", "https", "ftp", "mailto", "tel"}

# Some shared regexes

BLOCK_HTML = re.compile(
    r'^(<(?P<tag>(div|table|figure|video|iframe|details|summary|blockquote)\b)'
    r'[\s\S]*?>[\s\S]*?</(?P=tag)>)$',
    re.MULTILINE,
)
JSX_SELF_CLOSING = re.compile(r'<(?P<name>[A-Z][A-Za-z0-9]*)(?P<attrs>\s[^<>]*?)?\s*/>')
JSX_OPEN = re.compile(r'<(?P<name>[A-Z][A-Za-z0-9]*)(?P<attrs>\s[^<>]*)?>')
JSX_CLOSE = re.compile(r'</(?P<name>[A-Z][A-Za-z0-9]*)\s*>')
MDX_ESM = re.compile(r'^(?:import|export)\s')
# backtick or tilde fences, possibly indented (e.g. inside list items)
FENCE = re.compile(r"^[ \t]*(?P<fence>`{3,}|~{3,}).*?$.*?^[ \t]*(?P=fence)[ \t]*$",
                   re.MULTILINE | re.DOTALL)
SLUG_RE = re.compile(r"[^a-z0-9-]+")


# ---------- Runtime

def runtime_mode() -> str:
    return os.getenv("SITE_ENV", "development").strip().lower()


def is_production() -> bool:
    return runtime_mode() == "production"


def content_dir() -> pathlib.Path:
    override = os.getenv("SITE_CONTENT_DIR")
    return pathlib.Path(override) if override else CONTENT_DIR


def site_config_path() -> pathlib.Path:
    override = os.getenv("SITE_CONFIG")
    return pathlib.Path(override) if override else SITE_CONFIG


def og_font_path() -> Optional[pathlib.Path]:
    override = os.getenv("SITE_OG_FONT")
    return pathlib.Path(override) if override else None


# ---------- Site profile

class Socials(BaseModel):
    github: str = ""
    twitter: str = ""
    linkedin: str = ""
    medium: str = ""
    email: str = ""


class Project(BaseModel):
    title: str
    url: str
    description: str = ""
    repo: Optional[str] = None
    owner: Optional[str] = None


class SiteProfile(BaseModel):
    """Owner and project details shown in the site chrome."""

    name: str
    url: str
    description: str = ""
    bio_short: str = ""
    bio_detailed: str = ""
    company: str = ""
    company_url: str = ""
    location: str = ""
    education: str = ""
    github_owner: str = ""
    socials: Socials = Field(default_factory=Socials)
    projects: List[Project] = Field(default_factory=list)

    @property
    def base_url(self) -> str:
        return self.url.rstrip("/")

    def social_links(self) -> List[Dict[str, str]]:
        links = [
            {"label": "linkedin", "url": self.socials.linkedin},
            {"label": "github", "url": self.socials.github},
            {"label": "medium", "url": self.socials.medium},
        ]
        return [li for li in links if li["url"]]


def load_site_profile(path: pathlib.Path | None = None) -> SiteProfile:
    from .errors import ContentError
    from .utils import read_yaml

    path = path or site_config_path()
    if not path.exists():
        raise ContentError(f"site profile missing at {path}")
    try:
        return SiteProfile.model_validate(read_yaml(path))
    except ValidationError as exc:
        raise ContentError(f"invalid site profile {path}: {exc}") from exc
