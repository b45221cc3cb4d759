from __future__ import annotations

import logging
import pathlib
from datetime import date
from typing import Annotated, Dict, Iterable, List, Optional

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    StringConstraints,
    ValidationError,
    field_validator,
)

from .config import FILE_PATTERN, SLUG_PREFIX
from .errors import ContentError, PostNotFound
from .utils import _coerce_date_like, _norm_text, parse_frontmatter

logger = logging.getLogger(__name__)


class Document(BaseModel):
    """One blog post: validated front-matter plus the raw body."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: Annotated[StrictStr, StringConstraints(strip_whitespace=True, min_length=1)]
    description: Optional[StrictStr] = None
    publish_date: date = Field(alias="publishDate")
    modify_date: Optional[date] = Field(default=None, alias="modifyDate")
    tags: List[StrictStr]
    draft: StrictBool = False
    slug: str
    body: str = ""
    source_path: Optional[pathlib.Path] = None

    @field_validator("publish_date", "modify_date", mode="before")
    @classmethod
    def _dates(cls, v):
        return _coerce_date_like(v)


def derive_slug(path: pathlib.Path, content_root: pathlib.Path,
                prefix: str = SLUG_PREFIX) -> str:
    """File path relative to the content root, minus extension and prefix."""
    rel = path.relative_to(content_root).with_suffix("")
    if rel.name == "index" and rel.parent != pathlib.Path("."):
        rel = rel.parent
    flattened = rel.as_posix()
    if prefix and flattened.startswith(prefix):
        flattened = flattened[len(prefix):]
    return flattened


def _describe_errors(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(x) for x in err.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


def read_document(path: pathlib.Path, content_root: pathlib.Path,
                  prefix: str = SLUG_PREFIX) -> Document:
    text = _norm_text(path.read_text(encoding="utf-8"))
    try:
        fm, body = parse_frontmatter(text)
    except yaml.YAMLError as exc:
        raise ContentError(f"{path}: front-matter is not valid YAML ({exc})") from exc
    if fm is None:
        raise ContentError(f"{path}: missing front-matter block")
    if not isinstance(fm, dict):
        raise ContentError(f"{path}: front-matter must be a mapping")

    fields = {
        k: v for k, v in fm.items()
        if isinstance(k, str) and k not in ("slug", "body", "source_path")
    }
    try:
        return Document(
            **fields,
            slug=derive_slug(path, content_root, prefix),
            body=body,
            source_path=path,
        )
    except ValidationError as exc:
        raise ContentError(f"{path}: {_describe_errors(exc)}") from exc


def load_documents(
    content_root: pathlib.Path,
    pattern: str = FILE_PATTERN,
    prefix: str = SLUG_PREFIX,
) -> List[Document]:
    if not content_root.is_dir():
        raise ContentError(f"content directory not found: {content_root}")

    docs: List[Document] = []
    for p in sorted(content_root.glob(pattern)):
        if not p.is_file():
            continue
        docs.append(read_document(p, content_root, prefix))
    logger.info("loaded %d documents from %s", len(docs), content_root)
    return docs


def newest_first(docs: Iterable[Document]) -> List[Document]:
    return sorted(docs, key=lambda d: d.publish_date, reverse=True)


class PostCollection:
    """Read-only view over the loaded documents."""

    def __init__(self, documents: Iterable[Document]):
        self._documents = list(documents)
        self._by_slug: Dict[str, Document] = {}
        for doc in self._documents:
            if doc.slug in self._by_slug:
                logger.warning(
                    "duplicate slug %r: %s shadowed by %s",
                    doc.slug,
                    doc.source_path,
                    self._by_slug[doc.slug].source_path,
                )
                continue
            self._by_slug[doc.slug] = doc

    @classmethod
    def from_directory(
        cls,
        content_root: pathlib.Path,
        pattern: str = FILE_PATTERN,
        prefix: str = SLUG_PREFIX,
    ) -> "PostCollection":
        return cls(load_documents(content_root, pattern, prefix))

    def __iter__(self):
        return iter(self._documents)

    def __len__(self) -> int:
        return len(self._documents)

    def get(self, slug: str) -> Document:
        try:
            return self._by_slug[slug]
        except KeyError:
            raise PostNotFound(slug) from None

    def listing(self, production: bool) -> List[Document]:
        """Home page entries: drafts hidden in production only."""
        visible = (d for d in self._documents if not (production and d.draft))
        return newest_first(visible)

    def published(self) -> List[Document]:
        return newest_first(d for d in self._documents if not d.draft)
