"""
Shared schemas
"""
from pydantic import BaseModel
from typing import Optional


class BreadcrumbItem(BaseModel):
    """Breadcrumb entry; the last item (current page) has no href"""
    label: str
    href: Optional[str] = None


class PaginationMeta(BaseModel):
    """Page-based pagination metadata"""
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        total_pages = (total + limit - 1) // limit if total else 0
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page * limit < total,
            has_prev=page > 1,
        )


class AuthorSummary(BaseModel):
    """Public author fields embedded in other responses"""
    id: int
    full_name: str
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True
