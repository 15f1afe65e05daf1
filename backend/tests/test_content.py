import uuid
from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient, ASGITransport

from app.database import AsyncSessionLocal, init_db
from app.main import app
from app.models.blog_post import BlogPost
from app.models.case_study import CaseStudy
from app.models.testimonial import Testimonial

NOW = datetime(2026, 3, 1, tzinfo=timezone.utc)


async def _add(*rows):
    async with AsyncSessionLocal() as session:
        session.add_all(rows)
        await session.commit()


@pytest.fixture
async def client():
    await init_db()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def tag() -> str:
    return uuid.uuid4().hex[:8]


# ---------------------------------------------------------------------------
# Blog
# ---------------------------------------------------------------------------


def _post(tag, slug, published=True, days_ago=0, **kwargs):
    return BlogPost(
        slug=f"{slug}-{tag}",
        title=kwargs.pop("title", f"Hiring notes {tag}"),
        content=kwargs.pop("content", "How we approach executive search."),
        category=kwargs.pop("category", f"hiring-{tag}"),
        is_published=published,
        published_at=NOW - timedelta(days=days_ago),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_blog_lists_published_posts_newest_first(client, tag):
    await _add(
        _post(tag, "older", days_ago=10),
        _post(tag, "newer", days_ago=1),
        _post(tag, "draft", published=False),
    )

    response = await client.get("/api/blog/posts", params={"category": f"hiring-{tag}"})

    assert response.status_code == 200
    assert [p["slug"] for p in response.json()] == [f"newer-{tag}", f"older-{tag}"]


@pytest.mark.asyncio
async def test_blog_search_matches_title_or_content(client, tag):
    await _add(
        _post(tag, "in-title", title=f"Negotiating offers {tag}"),
        _post(tag, "in-content", content=f"Offer letters explained {tag}"),
        _post(tag, "unrelated", title="Something else", content="Nothing to see"),
    )

    response = await client.get("/api/blog/posts", params={"q": tag})

    slugs = {p["slug"] for p in response.json()}
    assert slugs == {f"in-title-{tag}", f"in-content-{tag}"}


@pytest.mark.asyncio
async def test_blog_post_by_slug(client, tag):
    await _add(_post(tag, "visible"), _post(tag, "hidden", published=False))

    found = await client.get(f"/api/blog/posts/visible-{tag}")
    assert found.status_code == 200
    assert found.json()["title"] == f"Hiring notes {tag}"

    assert (await client.get(f"/api/blog/posts/hidden-{tag}")).status_code == 404
    assert (await client.get(f"/api/blog/posts/missing-{tag}")).status_code == 404


# ---------------------------------------------------------------------------
# Testimonials
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_featured_testimonials_in_display_order(client, tag):
    await _add(
        Testimonial(client_name=f"Second {tag}", testimonial_text="Great", is_featured=True, display_order=2, rating=5),
        Testimonial(client_name=f"First {tag}", testimonial_text="Fast", is_featured=True, display_order=1),
        Testimonial(client_name=f"Hidden {tag}", testimonial_text="Fine", is_featured=False, display_order=0),
    )

    featured = (await client.get("/api/testimonials", params={"featured": "true"})).json()
    names = [t["client_name"] for t in featured if t["client_name"].endswith(tag)]
    assert names == [f"First {tag}", f"Second {tag}"]

    everyone = (await client.get("/api/testimonials")).json()
    names = [t["client_name"] for t in everyone if t["client_name"].endswith(tag)]
    assert names == [f"Hidden {tag}", f"First {tag}", f"Second {tag}"]


# ---------------------------------------------------------------------------
# Case studies
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_case_studies_only_published(client, tag):
    published = CaseStudy(title=f"VP Engineering {tag}", industry="SaaS", is_published=True, display_order=1)
    draft = CaseStudy(title=f"Unreleased {tag}", is_published=False)
    await _add(published, draft)

    titles = [c["title"] for c in (await client.get("/api/case-studies")).json()]
    assert f"VP Engineering {tag}" in titles
    assert f"Unreleased {tag}" not in titles

    found = await client.get(f"/api/case-studies/{published.id}")
    assert found.status_code == 200
    assert found.json()["industry"] == "SaaS"

    assert (await client.get(f"/api/case-studies/{draft.id}")).status_code == 404
    assert (await client.get(f"/api/case-studies/{uuid.uuid4()}")).status_code == 404
