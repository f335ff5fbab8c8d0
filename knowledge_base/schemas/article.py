"""
Article schemas
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from knowledge_base.models.article import ARTICLE_STATUSES
from knowledge_base.schemas.common import AuthorSummary, BreadcrumbItem, PaginationMeta
from knowledge_base.schemas.category import CategoryResponse

SLUG_FIELD_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
STATUS_PATTERN = "^(" + "|".join(ARTICLE_STATUSES) + ")$"


class RichTextDocument(BaseModel):
    """Editor document: {"type": "doc", "content": [...]}"""
    type: str = Field(..., pattern="^doc$")
    content: List[Dict[str, Any]] = []


class ArticleCreate(BaseModel):
    """Schema for creating an article"""
    title: str = Field(..., min_length=1, max_length=200)
    slug: Optional[str] = Field(None, min_length=1, max_length=200, pattern=SLUG_FIELD_PATTERN)
    content: RichTextDocument
    excerpt: Optional[str] = Field(None, max_length=500)
    status: str = Field(default="draft", pattern=STATUS_PATTERN)
    category_ids: List[int] = []

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Title is required")
        return value


class ArticleUpdate(BaseModel):
    """Schema for updating an article"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, min_length=1, max_length=200, pattern=SLUG_FIELD_PATTERN)
    content: Optional[RichTextDocument] = None
    excerpt: Optional[str] = Field(None, max_length=500)
    status: Optional[str] = Field(None, pattern=STATUS_PATTERN)
    category_ids: Optional[List[int]] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("Title is required")
        return value


class ArticleFilters(BaseModel):
    """
    Article listing filters

    Blank values mean "not provided", so clearing a filter in the UI
    yields the unfiltered listing.
    """
    category_id: Optional[int] = None
    q: Optional[str] = Field(None, max_length=200)
    status: str = Field(default="published", pattern=STATUS_PATTERN)
    author_id: Optional[int] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)

    @field_validator("category_id", "q", "status", "author_id", "page", "limit", mode="before")
    @classmethod
    def blank_to_default(cls, value, info):
        if isinstance(value, str):
            value = value.strip()
        if value is None or value == "":
            return cls.model_fields[info.field_name].default
        return value


class ArticleSummary(BaseModel):
    """Article listing row"""
    id: int
    title: str
    slug: str
    excerpt: Optional[str]
    status: str
    author_id: int
    author_name: str = "Unknown"
    published_at: Optional[datetime]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    view_count: int
    rank: Optional[float] = None

    class Config:
        from_attributes = True


class ArticleListResponse(BaseModel):
    data: List[ArticleSummary]
    meta: PaginationMeta


class ArticleResponse(BaseModel):
    """Full article"""
    id: int
    title: str
    slug: str
    content: Dict[str, Any]
    excerpt: Optional[str]
    status: str
    author_id: int
    published_at: Optional[datetime]
    view_count: int
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class ArticleDetailResponse(ArticleResponse):
    author: Optional[AuthorSummary] = None
    categories: List[CategoryResponse] = []
    breadcrumbs: List[BreadcrumbItem] = []


class ArticleMutationResponse(BaseModel):
    data: ArticleResponse
    message: str
