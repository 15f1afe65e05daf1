from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class BlogPostRead(BaseModel):
    id: UUID
    slug: str
    title: str
    excerpt: Optional[str] = None
    content: str
    category: Optional[str] = None
    author: Optional[str] = None
    published_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TestimonialRead(BaseModel):
    id: UUID
    client_name: str
    client_title: Optional[str] = None
    client_company: Optional[str] = None
    testimonial_text: str
    rating: Optional[int] = None
    is_featured: bool

    model_config = {"from_attributes": True}


class CaseStudyRead(BaseModel):
    id: UUID
    title: str
    industry: Optional[str] = None
    position_filled: Optional[str] = None
    challenge: Optional[str] = None
    solution: Optional[str] = None
    results: Optional[str] = None
    timeline: Optional[str] = None

    model_config = {"from_attributes": True}
