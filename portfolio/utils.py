from __future__ import annotations

import pathlib
import re
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple

import yaml

from .config import (
    SLUG_RE,
)


def slugify(s: str) -> str:
    return re.sub(r"-{2,}", "-", SLUG_RE.sub("-", s.lower()).strip("-"))


def read_yaml(path: pathlib.Path) -> Dict[str, Any]:
    if path.exists():
        return yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return {}


def _norm_text(s: str) -> str:
    return s.replace('\r\n', '\n').replace('\r', '\n').lstrip('\ufeff')


def _coerce_date_like(v):
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    if isinstance(v, str):
        s = v.strip().strip('"').strip("'")
        try:
            return date.fromisoformat(s)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
        except ValueError:
            return v
    return v


def parse_frontmatter(text: str) -> Tuple[Optional[Dict[str, Any]], str]:
    s = text.lstrip()
    if not s.startswith("---\n") and not s.startswith("---\r\n"):
        return None, text

    lines = s.splitlines(keepends=True)
    for i in range(1, len(lines)):
        if lines[i].strip() == "---":
            fm_text = "".join(lines[1:i])
            body = "".join(lines[i + 1 :])
            fm = yaml.safe_load(fm_text)
            return ({} if fm is None else fm), body
    return None, text


def normalize_markdown_light(md: str) -> str:
    md = re.sub(r'\n{3,}', '\n\n', md)
    md = re.sub(r'([^\n])\n(#{1,6}\s)', r'\1\n\n\2', md)
    return md


def format_long_date(d: date) -> str:
    return f"{d:%B} {d.day}, {d.year}"


def format_short_date(d: date) -> str:
    return f"{d:%b} {d.day}, {d.year}"
