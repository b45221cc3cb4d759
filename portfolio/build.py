from __future__ import annotations

import asyncio
import hashlib
import pathlib
import shutil
import tempfile
from typing import Optional

from .config import SiteProfile
from .feed import build_feed
from .og import render_og_image
from .pages import render_home, render_post
from .posts import PostCollection
from .projects import load_project_cards


def mirror_tree(src_dir: pathlib.Path, dst_dir: pathlib.Path) -> None:
    if not src_dir.exists():
        if dst_dir.exists():
            shutil.rmtree(dst_dir)
        return

    def walk_files(base: pathlib.Path) -> set[str]:
        out = set()
        for p in base.rglob("*"):
            if p.is_file():
                out.add(str(p.relative_to(base)))
        return out

    src_files = walk_files(src_dir)
    dst_files = walk_files(dst_dir) if dst_dir.exists() else set()

    dst_dir.mkdir(parents=True, exist_ok=True)

    for rel in src_files:
        s = src_dir / rel
        d = dst_dir / rel
        d.parent.mkdir(parents=True, exist_ok=True)
        if (not d.exists()) or (
            hashlib.sha256(s.read_bytes()).hexdigest()
            != hashlib.sha256(d.read_bytes()).hexdigest()
        ):
            shutil.copy2(s, d)

    for rel in (dst_files - src_files):
        stale = dst_dir / rel
        try:
            stale.unlink()
        except IsADirectoryError:
            shutil.rmtree(stale, ignore_errors=True)


def _write(path: pathlib.Path, data: bytes | str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(data, str):
        path.write_text(data, encoding="utf-8")
    else:
        path.write_bytes(data)


def render_site(
    posts: PostCollection,
    site: SiteProfile,
    stage: pathlib.Path,
    production: bool,
    with_stars: bool = True,
) -> int:
    """Render every route below `stage`; returns the number of posts written."""
    entries = posts.listing(production=production)
    projects = asyncio.run(load_project_cards(site, with_stars=with_stars))
    _write(stage / "index.html", render_home(site, entries, projects))
    _write(stage / "api" / "rss", build_feed(site, posts.published()))

    count = 0
    for doc in posts:
        if production and doc.draft:
            print(f"- {doc.slug} is a draft, skip")
            continue
        out_dir = stage / "blog" / doc.slug
        _write(out_dir / "index.html", render_post(doc, site))
        _write(out_dir / "og.png", render_og_image(doc.title, site))
        print(f"✓ rendered {doc.slug}")
        count += 1
    return count


def build_site(
    posts: PostCollection,
    site: SiteProfile,
    out_dir: pathlib.Path,
    production: bool,
    with_stars: bool = True,
    stage_root: Optional[pathlib.Path] = None,
) -> int:
    """
    Render the site into a staging directory, then mirror it to `out_dir`.

    Only changed files are rewritten and files of removed posts are deleted.
    """
    with tempfile.TemporaryDirectory(dir=stage_root) as tmp:
        stage = pathlib.Path(tmp)
        count = render_site(posts, site, stage, production, with_stars)
        mirror_tree(stage, out_dir)
    print(f"✓ built {count} posts into {out_dir}")
    return count
