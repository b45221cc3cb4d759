"""
Command line entry point for the portfolio site.

- check: load and validate every post and the site profile
- build: render all routes into a static output directory
- serve: run the FastAPI app with uvicorn
"""

from __future__ import annotations

import argparse
import logging
import os
import pathlib
import sys
from typing import List, Optional

from .build import build_site
from .config import (
    BUILD_OUT,
    FILE_PATTERN,
    content_dir,
    is_production,
    load_site_profile,
    site_config_path,
)
from .errors import ContentError
from .posts import PostCollection


def _load(args) -> tuple:
    site = load_site_profile(args.site_config)
    posts = PostCollection.from_directory(args.content_dir, args.pattern)
    return posts, site


def cmd_check(args) -> int:
    posts, site = _load(args)
    drafts = sum(1 for d in posts if d.draft)
    print(f"✓ {len(posts)} posts ({drafts} drafts) for {site.url}")
    return 0


def cmd_build(args) -> int:
    posts, site = _load(args)
    production = args.production or is_production()
    build_site(posts, site, args.out, production, with_stars=not args.no_stars)
    return 0


def cmd_serve(args) -> int:
    import uvicorn

    # the app factory reads its paths from the environment
    os.environ["SITE_CONTENT_DIR"] = str(args.content_dir)
    os.environ["SITE_CONFIG"] = str(args.site_config)

    uvicorn.run(
        "portfolio.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="portfolio", description=__doc__,
                                     formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--content-dir", type=pathlib.Path, default=None)
    parser.add_argument("--site-config", type=pathlib.Path, default=None)
    parser.add_argument("--pattern", default=FILE_PATTERN)
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="validate content")
    check.set_defaults(func=cmd_check)

    build = sub.add_parser("build", help="render the static site")
    build.add_argument("--out", type=pathlib.Path, default=BUILD_OUT)
    build.add_argument("--production", action="store_true",
                       help="hide drafts even when SITE_ENV is not production")
    build.add_argument("--no-stars", action="store_true",
                       help="skip GitHub star lookups")
    build.set_defaults(func=cmd_build)

    serve = sub.add_parser("serve", help="run the development server")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")
    serve.set_defaults(func=cmd_serve)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    args = build_parser().parse_args(argv)
    args.content_dir = args.content_dir or content_dir()
    args.site_config = args.site_config or site_config_path()
    try:
        return args.func(args)
    except ContentError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
