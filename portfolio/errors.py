"""
Exceptions raised while loading and looking up site content.
"""


class ContentError(Exception):
    """Raised when a content file or the site profile cannot be loaded."""


class PostNotFound(LookupError):
    """Raised when no document matches the requested slug."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"no post with slug {slug!r}")
        self.slug = slug
