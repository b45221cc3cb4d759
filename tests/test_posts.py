import logging
from datetime import date

import pytest

from portfolio.errors import ContentError, PostNotFound
from portfolio.posts import PostCollection, derive_slug, load_documents



def test_slugs_strip_directory_prefix(posts):
    assert sorted(d.slug for d in posts) == [
        "draft-post",
        "first-post",
        "nested/second-post",
        "third",
    ]


def test_slug_matches_file_path_without_prefix(posts, content_root):
    for doc in posts:
        rel = doc.source_path.relative_to(content_root / "blog").with_suffix("")
        if rel.name == "index":
            rel = rel.parent
        assert doc.slug == rel.as_posix()


def test_derive_slug_keeps_paths_outside_prefix(tmp_path):
    assert derive_slug(tmp_path / "notes" / "a.mdx", tmp_path) == "notes/a"


def test_front_matter_fields(posts):
    second = posts.get("nested/second-post")
    assert second.title == "Second post"
    assert second.description is None
    assert second.publish_date == date(2024, 3, 10)
    assert second.modify_date == date(2024, 3, 12)
    assert second.tags == ["python"]
    assert second.draft is False
    assert "Body text." in second.body


def test_datetime_publish_date_is_reduced_to_date(tmp_path, make_post):
    make_post(tmp_path, "blog/a.mdx", """
        title: A
        publishDate: 2024-02-01T10:30:00Z
        tags: [x]
    """)
    (doc,) = load_documents(tmp_path)
    assert doc.publish_date == date(2024, 2, 1)


@pytest.mark.parametrize(
    "front, field",
    [
        ("publishDate: 2024-01-01\ntags: [a]", "title"),
        ("title: T\ntags: [a]", "publishDate"),
        ("title: T\npublishDate: 2024-01-01", "tags"),
        ("title: 2024\npublishDate: 2024-01-01\ntags: [a]", "title"),
        ("title: \"\"\npublishDate: 2024-01-01\ntags: [a]", "title"),
        ("title: \"   \"\npublishDate: 2024-01-01\ntags: [a]", "title"),
        ("title: T\npublishDate: 2024-01-01\ntags: python", "tags"),
        ("title: T\npublishDate: not-a-date\ntags: [a]", "publishDate"),
        ("title: T\npublishDate: 2024-01-01\ntags: [a]\ndraft: maybe", "draft"),
    ],
)
def test_invalid_front_matter_fails_the_load(tmp_path, front, field, make_post):
    make_post(tmp_path, "blog/bad.mdx", front)
    with pytest.raises(ContentError) as excinfo:
        load_documents(tmp_path)
    assert field in str(excinfo.value)
    assert "bad.mdx" in str(excinfo.value)


def test_missing_front_matter_block(tmp_path):
    path = tmp_path / "blog" / "plain.mdx"
    path.parent.mkdir(parents=True)
    path.write_text("# Just a heading\n", encoding="utf-8")
    with pytest.raises(ContentError, match="missing front-matter"):
        load_documents(tmp_path)


def test_missing_content_directory(tmp_path):
    with pytest.raises(ContentError):
        load_documents(tmp_path / "nope")


def test_non_matching_files_are_ignored(tmp_path, make_post):
    make_post(tmp_path, "blog/a.mdx", "title: A\npublishDate: 2024-01-01\ntags: []")
    make_post(tmp_path, "blog/b.md", "title: B")
    make_post(tmp_path, "pages/c.mdx", "title: C")
    assert [d.slug for d in load_documents(tmp_path)] == ["a"]


def test_listing_hides_drafts_only_in_production(posts):
    assert "draft-post" in [d.slug for d in posts.listing(production=False)]
    assert "draft-post" not in [d.slug for d in posts.listing(production=True)]


@pytest.mark.parametrize("production", [True, False])
def test_listing_is_newest_first(posts, production):
    dates = [d.publish_date for d in posts.listing(production=production)]
    assert dates == sorted(dates, reverse=True)


def test_published_never_contains_drafts(posts):
    published = posts.published()
    assert all(not d.draft for d in published)
    assert len(published) == 3


def test_unknown_slug_raises_not_found(posts):
    with pytest.raises(PostNotFound) as excinfo:
        posts.get("missing")
    assert isinstance(excinfo.value, LookupError)
    assert excinfo.value.slug == "missing"


def test_duplicate_slugs_shadow_and_warn(tmp_path, caplog, make_post):
    make_post(tmp_path, "blog/dup.mdx", "title: Flat\npublishDate: 2024-01-01\ntags: []")
    make_post(tmp_path, "blog/dup/index.mdx", "title: Nested\npublishDate: 2024-01-02\ntags: []")
    first = sorted(tmp_path.glob("blog/**/*.mdx"))[0]

    with caplog.at_level(logging.WARNING, logger="portfolio.posts"):
        posts = PostCollection.from_directory(tmp_path)

    assert len(posts) == 2
    assert posts.get("dup").source_path == first
    assert "duplicate slug" in caplog.text
