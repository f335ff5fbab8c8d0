"""
Search router
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from knowledge_base.database import get_db
from knowledge_base.schemas.search import SearchResponse, SearchResult
from knowledge_base.services.rate_limiter import rate_limit
from knowledge_base.services.search import CONTENT_TYPES, SEARCH_RESULT_LIMIT, search_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["Search"])

MIN_QUERY_LENGTH = 2
MAX_QUERY_LENGTH = 200


@router.get("", response_model=SearchResponse, dependencies=[Depends(rate_limit("search"))])
async def search(
    q: Optional[str] = None,
    content_type: str = Query("all", alias="type"),
    limit: int = Query(20, ge=1, le=SEARCH_RESULT_LIMIT),
    db: Session = Depends(get_db)
):
    """
    Full-text search across published articles and Q&A
    """
    query = (q or "").strip()
    if len(query) < MIN_QUERY_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Search query must be at least {MIN_QUERY_LENGTH} characters"
        )
    if len(query) > MAX_QUERY_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Search query must be {MAX_QUERY_LENGTH} characters or less"
        )
    if content_type not in CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid type. Must be one of: {', '.join(CONTENT_TYPES)}"
        )

    try:
        results = search_service.search_content(db, query, content_type=content_type, limit=limit)
    except SQLAlchemyError as e:
        logger.error(f"Search failed for {query!r}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Search failed"
        )

    return SearchResponse(
        results=[SearchResult(**row) for row in results],
        count=len(results),
        query=query,
    )
