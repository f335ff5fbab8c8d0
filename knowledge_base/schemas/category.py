"""
Category schemas
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from knowledge_base.schemas.common import BreadcrumbItem


class CategoryCreate(BaseModel):
    """Schema for creating a category; slug is derived from name when omitted"""
    name: str
    slug: Optional[str] = None
    description: Optional[str] = None
    parent_id: Optional[int] = None
    sort_order: int = Field(default=0, ge=0)


class CategoryUpdate(BaseModel):
    """Schema for updating a category (only provided fields change)"""
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    parent_id: Optional[int] = None
    sort_order: Optional[int] = Field(None, ge=0)


class CategoryResponse(BaseModel):
    """Schema for category response"""
    id: int
    name: str
    slug: str
    description: Optional[str]
    parent_id: Optional[int]
    sort_order: int
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    article_count: Optional[int] = None

    class Config:
        from_attributes = True


class CategorySummary(BaseModel):
    id: int
    name: str
    slug: str

    class Config:
        from_attributes = True


class CategoryArticleSummary(BaseModel):
    id: int
    title: str
    slug: str
    excerpt: Optional[str]
    status: str
    published_at: Optional[datetime]
    view_count: int

    class Config:
        from_attributes = True


class CategoryDetailResponse(CategoryResponse):
    """Category with counts, neighbours and breadcrumbs"""
    article_count: int = 0
    subcategory_count: int = 0
    depth: int = 0
    parent: Optional[CategorySummary] = None
    subcategories: List[CategoryResponse] = []
    articles: Optional[List[CategoryArticleSummary]] = None
    breadcrumbs: List[BreadcrumbItem] = []


class CategoryListResponse(BaseModel):
    data: List[CategoryResponse]
    count: int


class CategoryTreeNode(BaseModel):
    """Category tree node annotated with its depth (root = 0)"""
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    parent_id: Optional[int] = None
    sort_order: int = 0
    depth: int
    article_count: int = 0
    children: List["CategoryTreeNode"] = []


CategoryTreeNode.model_rebuild()


class MoveArticlesRequest(BaseModel):
    target_category_id: int


class MoveArticlesResponse(BaseModel):
    message: str
    moved_count: int
    source_category: Optional[str] = None
    target_category: Optional[str] = None
