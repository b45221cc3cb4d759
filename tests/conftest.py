import asyncio
import inspect
import textwrap

import httpx
import pytest
from fastapi.testclient import TestClient

from portfolio.app import create_app
from portfolio.config import Project, SiteProfile, Socials
from portfolio.posts import PostCollection


def write_post(root, rel, front, body=""):
    """Write a content file below `root` and return its path."""
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        "---\n" + textwrap.dedent(front).strip() + "\n---\n\n" + textwrap.dedent(body),
        encoding="utf-8",
    )
    return path


def github_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path.endswith("/widget"):
        return httpx.Response(200, json={"stargazers_count": 42})
    return httpx.Response(500, json={"message": "boom"})


@pytest.fixture()
def site():
    return SiteProfile(
        name="Test Author",
        url="https://example.com",
        description="Writing about software.",
        bio_short="I build things.",
        github_owner="octo",
        socials=Socials(
            github="https://github.com/octo",
            linkedin="https://linkedin.com/in/octo",
            email="octo@example.com",
        ),
        projects=[
            Project(title="Widget", url="https://example.com/widget", repo="widget",
                    description="A widget."),
            Project(title="Gadget", url="https://example.com/gadget", repo="gadget",
                    description="A gadget."),
        ],
    )


@pytest.fixture()
def content_root(tmp_path):
    root = tmp_path / "content"
    write_post(
        root,
        "blog/first-post.mdx",
        """
        title: First post
        description: The very first one.
        publishDate: 2024-01-05
        tags: [intro, meta]
        """,
        """
        # Welcome

        Hello <script>alert(1)</script> there.

        ![pic](https://example.com/pic.png)
        """,
    )
    write_post(
        root,
        "blog/nested/second-post/index.mdx",
        """
        title: Second post
        publishDate: "2024-03-10"
        modifyDate: 2024-03-12
        tags: [python]
        """,
        """
        ## Section

        Body text.
        """,
    )
    write_post(
        root,
        "blog/draft-post.mdx",
        """
        title: Draft post
        publishDate: 2024-06-01
        tags: []
        draft: true
        """,
        "Not ready.\n",
    )
    write_post(
        root,
        "blog/third.mdx",
        """
        title: Third post
        publishDate: 2023-12-25
        tags: [holiday]
        """,
        "Short.\n",
    )
    return root


@pytest.fixture()
def posts(content_root):
    return PostCollection.from_directory(content_root)


@pytest.fixture()
def client(posts, site, monkeypatch):
    """Provide a FastAPI TestClient with GitHub calls mocked out."""
    monkeypatch.delenv("SITE_ENV", raising=False)
    app = create_app(
        posts=posts,
        site=site,
        http_client_factory=lambda: httpx.AsyncClient(
            transport=httpx.MockTransport(github_handler)
        ),
    )
    return TestClient(app)


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem):
    """Run async test functions without requiring pytest-asyncio plugin."""

    test_func = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_func):
        loop = asyncio.new_event_loop()
        try:
            funcargs = {
                name: pyfuncitem.funcargs[name]
                for name in pyfuncitem._fixtureinfo.argnames
            }
            loop.run_until_complete(test_func(**funcargs))
        finally:
            loop.close()
        return True
    return None


@pytest.fixture()
def make_post():
    return write_post
