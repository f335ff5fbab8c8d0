"""
Search schemas
"""
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class SearchResult(BaseModel):
    type: str  # 'article' or 'question'
    id: int
    title: str
    excerpt: str
    rank: float
    created_at: Optional[datetime]
    url: str


class SearchResponse(BaseModel):
    results: List[SearchResult]
    count: int
    query: str
