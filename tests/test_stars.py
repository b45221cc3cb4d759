import httpx

from portfolio.config import Project, SiteProfile
from portfolio.projects import load_project_cards
from portfolio.stars import fetch_project_stars, fetch_stargazers_count


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def test_returns_count_on_success():
    seen = []

    def handler(request):
        seen.append(str(request.url))
        return httpx.Response(200, json={"stargazers_count": 7})

    async with _client(handler) as client:
        assert await fetch_stargazers_count("octo", "widget", client) == 7
    assert seen == ["https://api.github.com/repos/octo/widget"]


async def test_zero_count_renders_nothing():
    async with _client(lambda r: httpx.Response(200, json={"stargazers_count": 0})) as client:
        assert await fetch_stargazers_count("octo", "widget", client) is None


async def test_http_error_is_swallowed():
    async with _client(lambda r: httpx.Response(404, json={"message": "Not Found"})) as client:
        assert await fetch_stargazers_count("octo", "missing", client) is None


async def test_transport_error_is_swallowed():
    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    async with _client(handler) as client:
        assert await fetch_stargazers_count("octo", "widget", client) is None


async def test_malformed_body_is_swallowed():
    async with _client(lambda r: httpx.Response(200, content=b"<html>")) as client:
        assert await fetch_stargazers_count("octo", "widget", client) is None
    async with _client(lambda r: httpx.Response(200, json=[1, 2])) as client:
        assert await fetch_stargazers_count("octo", "widget", client) is None


async def test_project_stars_use_default_owner_and_skip_projects_without_repo():
    seen = []

    def handler(request):
        seen.append(request.url.path)
        return httpx.Response(200, json={"stargazers_count": 3})

    projects = [
        Project(title="A", url="https://a", repo="a"),
        Project(title="B", url="https://b", repo="b", owner="someone"),
        Project(title="C", url="https://c"),
    ]
    async with _client(handler) as client:
        stars = await fetch_project_stars(projects, "octo", client)

    assert stars == {("octo", "a"): 3, ("someone", "b"): 3}
    assert sorted(seen) == ["/repos/octo/a", "/repos/someone/b"]


async def test_projects_sharing_a_title_keep_their_own_counts():
    counts = {"/repos/octo/cli": 5, "/repos/other/cli": 9}

    def handler(request):
        return httpx.Response(200, json={"stargazers_count": counts[request.url.path]})

    site = SiteProfile(
        name="N",
        url="https://example.com",
        github_owner="octo",
        projects=[
            Project(title="cli", url="https://example.com/a", repo="cli"),
            Project(title="cli", url="https://example.com/b", repo="cli", owner="other"),
        ],
    )
    async with _client(handler) as client:
        cards = await load_project_cards(site, client)

    assert [card["stars"] for card in cards] == [5, 9]
