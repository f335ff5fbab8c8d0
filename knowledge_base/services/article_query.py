"""
Article listing query composer

Turns ArticleFilters into a single SQLAlchemy query: category through the
association table, status/author as plain predicates, and free text through
the search service (matching ids only, ordered by rank).
"""
from typing import List, Optional, Tuple
from sqlalchemy import case
from sqlalchemy.orm import Session, joinedload
from knowledge_base.models.article import Article, ArticleCategory
from knowledge_base.models.user import User
from knowledge_base.schemas.article import ArticleFilters
from knowledge_base.services.search import search_service


def compose_article_query(db: Session, filters: ArticleFilters, viewer: Optional[User] = None):
    """
    Build the filtered, ordered (but unpaginated) article query

    Non-published listings only ever contain the viewer's own articles,
    except for admins. Anonymous viewers get nothing for those statuses.

    Returns:
        (query, ranks) where ranks maps article id -> search rank, or None
        when no text query was given
    """
    query = db.query(Article).filter(Article.status == filters.status)

    if filters.status != "published" and not (viewer and viewer.is_admin):
        query = query.filter(Article.author_id == (viewer.id if viewer else -1))

    if filters.category_id is not None:
        query = query.join(ArticleCategory, ArticleCategory.article_id == Article.id).filter(
            ArticleCategory.category_id == filters.category_id
        )

    if filters.author_id is not None:
        query = query.filter(Article.author_id == filters.author_id)

    ranks = None
    if filters.q:
        ranks = search_service.rank_articles(db, filters.q) if filters.status == "published" else {}
        if not ranks:
            return query.filter(Article.id.in_([])), ranks
        query = query.filter(Article.id.in_(list(ranks))).order_by(
            case(ranks, value=Article.id, else_=0.0).desc(),
            Article.published_at.desc(),
            Article.id.desc(),
        )
    else:
        query = query.order_by(Article.published_at.desc(), Article.created_at.desc(), Article.id.desc())

    return query, ranks


def list_articles(db: Session, filters: ArticleFilters, viewer: Optional[User] = None) -> Tuple[List[Article], int, Optional[dict]]:
    """
    Run a filtered article listing

    Returns:
        (page of articles, total matching rows, ranks or None)
    """
    query, ranks = compose_article_query(db, filters, viewer)
    total = query.order_by(None).count()
    items = (
        query.options(joinedload(Article.author))
        .offset((filters.page - 1) * filters.limit)
        .limit(filters.limit)
        .all()
    )
    return items, total, ranks
