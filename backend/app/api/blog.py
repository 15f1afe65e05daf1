from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import desc, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.blog_post import BlogPost
from app.schemas.content import BlogPostRead

router = APIRouter(prefix="/blog", tags=["blog"])


@router.get("/posts", response_model=List[BlogPostRead])
async def list_posts(
    category: Optional[str] = None,
    q: Optional[str] = Query(None, min_length=1, max_length=100),
    db: AsyncSession = Depends(get_db),
):
    """Published posts, newest first, optionally filtered by category or a search term."""
    query = select(BlogPost).where(BlogPost.is_published.is_(True))
    if category:
        query = query.where(BlogPost.category == category)
    if q:
        pattern = f"%{q}%"
        query = query.where(or_(BlogPost.title.ilike(pattern), BlogPost.content.ilike(pattern)))
    result = await db.execute(query.order_by(desc(BlogPost.published_at)))
    return result.scalars().all()


@router.get("/posts/{slug}", response_model=BlogPostRead)
async def get_post(slug: str, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(BlogPost).where(BlogPost.slug == slug, BlogPost.is_published.is_(True))
    )
    post = result.scalars().first()
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post
