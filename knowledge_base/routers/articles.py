"""
Articles router
"""
import logging
import time
from datetime import datetime, timezone
from typing import List, Optional
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from pydantic import ValidationError
from sqlalchemy.orm import Session
from knowledge_base.database import get_db, SessionLocal
from knowledge_base.schemas.article import (
    ArticleCreate, ArticleUpdate, ArticleFilters, ArticleSummary, ArticleListResponse,
    ArticleResponse, ArticleDetailResponse, ArticleMutationResponse
)
from knowledge_base.schemas.category import CategoryResponse
from knowledge_base.schemas.common import AuthorSummary, PaginationMeta
from knowledge_base.services.article_query import list_articles
from knowledge_base.services.auth import get_current_user, get_optional_user
from knowledge_base.services.breadcrumbs import build_breadcrumbs, category_path
from knowledge_base.services.category_tree import CategoryIntegrityError
from knowledge_base.services.content import sanitize_document, sanitize_user_input, slugify
from knowledge_base.services.rate_limiter import rate_limit
from knowledge_base.models.user import User
from knowledge_base.models.category import Category
from knowledge_base.models.article import Article, ArticleCategory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/articles", tags=["Articles"])


def validation_error(errors: dict) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": "Validation failed", "errors": errors},
    )


def get_article_or_404(db: Session, article_id: int) -> Article:
    article = db.query(Article).filter(Article.id == article_id).first()
    if not article:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Article not found"
        )
    return article


def require_article_owner(article: Article, user: User):
    if article.author_id != user.id and not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the author or an admin can modify this article"
        )


def unique_article_slug(db: Session, title: str) -> str:
    """Slug from the title, suffixed with a timestamp when already taken"""
    slug = slugify(title) or "article"
    if db.query(Article).filter(Article.slug == slug).first():
        slug = f"{slug}-{int(time.time() * 1000)}"
    return slug


def check_category_ids(db: Session, category_ids: List[int]) -> List[int]:
    """De-duplicate category ids (keeping order) and make sure they exist"""
    unique_ids = list(dict.fromkeys(category_ids))
    if not unique_ids:
        return unique_ids
    found = {c.id for c in db.query(Category.id).filter(Category.id.in_(unique_ids)).all()}
    missing = [str(category_id) for category_id in unique_ids if category_id not in found]
    if missing:
        raise validation_error({"category_ids": f"Categories not found: {', '.join(missing)}"})
    return unique_ids


def increment_view_count(article_id: int):
    """
    Best-effort view counter, run after the response is sent

    Failures are logged and never reach the client.
    """
    db = SessionLocal()
    try:
        db.query(Article).filter(Article.id == article_id).update(
            {Article.view_count: Article.view_count + 1}, synchronize_session=False
        )
        db.commit()
    except Exception as e:
        db.rollback()
        logger.warning(f"Failed to increment view count for article {article_id}: {e}")
    finally:
        db.close()


@router.get("", response_model=ArticleListResponse)
async def get_articles(
    category: Optional[str] = None,
    q: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    author: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """
    List articles with filters

    Blank parameters are ignored, so clearing every filter returns the
    same listing as passing none. With q, results are ordered by search
    rank; otherwise newest published first.
    """
    try:
        filters = ArticleFilters(
            category_id=category, q=q, status=status_filter,
            author_id=author, page=page, limit=limit,
        )
    except ValidationError as e:
        raise validation_error({
            ".".join(str(part) for part in error["loc"]): error["msg"] for error in e.errors()
        })

    items, total, ranks = list_articles(db, filters, current_user)

    data = []
    for article in items:
        summary = ArticleSummary.model_validate(article)
        summary.author_name = article.author.full_name if article.author else "Unknown"
        if ranks is not None:
            summary.rank = ranks.get(article.id)
        data.append(summary)

    return ArticleListResponse(data=data, meta=PaginationMeta.build(filters.page, filters.limit, total))


@router.post(
    "",
    response_model=ArticleMutationResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("mutations"))],
)
async def create_article(
    article_data: ArticleCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Create new article

    Published articles need at least one category. The slug is generated
    from the title when omitted.
    """
    category_ids = check_category_ids(db, article_data.category_ids)
    if article_data.status == "published" and not category_ids:
        raise validation_error({"category_ids": "Published articles must have at least one category"})

    if article_data.slug:
        if db.query(Article).filter(Article.slug == article_data.slug).first():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="An article with this slug already exists"
            )
        slug = article_data.slug
    else:
        slug = unique_article_slug(db, article_data.title)

    new_article = Article(
        title=sanitize_user_input(article_data.title),
        slug=slug,
        content=sanitize_document(article_data.content.model_dump()),
        excerpt=sanitize_user_input(article_data.excerpt) or None,
        status=article_data.status,
        author_id=current_user.id,
        published_at=datetime.now(timezone.utc) if article_data.status == "published" else None,
    )
    db.add(new_article)
    db.flush()
    for category_id in category_ids:
        db.add(ArticleCategory(article_id=new_article.id, category_id=category_id))
    db.commit()
    db.refresh(new_article)

    logger.info(f"Article {new_article.id} created by user {current_user.id}")
    return ArticleMutationResponse(
        data=ArticleResponse.model_validate(new_article),
        message="Article created successfully",
    )


@router.get("/{article_id}", response_model=ArticleDetailResponse)
async def get_article(
    article_id: int,
    background_tasks: BackgroundTasks,
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """
    Get article with author, categories and breadcrumbs

    Drafts and archived articles are only visible to their author.
    """
    article = get_article_or_404(db, article_id)
    if article.status != "published" and (current_user is None or current_user.id != article.author_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Article not found"
        )

    categories = article.categories
    path = []
    if categories:
        categories_by_id = {c.id: c for c in db.query(Category).all()}
        try:
            path = category_path(categories[0].id, categories_by_id)
        except CategoryIntegrityError as exc:
            logger.error(f"Category hierarchy error for article {article_id}: {exc}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Category hierarchy is invalid"
            )

    detail = ArticleDetailResponse.model_validate(article)
    detail.author = AuthorSummary.model_validate(article.author) if article.author else None
    detail.categories = [CategoryResponse.model_validate(c) for c in categories]
    detail.breadcrumbs = build_breadcrumbs(path, article.title)

    if article.status == "published":
        background_tasks.add_task(increment_view_count, article.id)

    return detail


@router.patch(
    "/{article_id}",
    response_model=ArticleMutationResponse,
    dependencies=[Depends(rate_limit("mutations"))],
)
async def update_article(
    article_id: int,
    article_data: ArticleUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Update article (author or admin)
    """
    article = get_article_or_404(db, article_id)
    require_article_owner(article, current_user)

    update_data = article_data.model_dump(exclude_unset=True)

    category_ids = None
    if update_data.get("category_ids") is not None:
        category_ids = check_category_ids(db, update_data["category_ids"])

    new_status = update_data.get("status") or article.status
    resulting_categories = category_ids if category_ids is not None else [c.id for c in article.categories]
    if new_status == "published" and not resulting_categories:
        raise validation_error({"category_ids": "Published articles must have at least one category"})

    if update_data.get("slug") and update_data["slug"] != article.slug:
        existing = db.query(Article).filter(Article.slug == update_data["slug"], Article.id != article.id).first()
        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="An article with this slug already exists"
            )
        article.slug = update_data["slug"]

    if update_data.get("title") is not None:
        article.title = sanitize_user_input(update_data["title"])
    if update_data.get("content") is not None:
        article.content = sanitize_document(update_data["content"])
    if "excerpt" in update_data:
        article.excerpt = sanitize_user_input(update_data["excerpt"]) or None

    # published_at follows transitions into and out of "published"
    if new_status != article.status:
        if new_status == "published":
            article.published_at = datetime.now(timezone.utc)
        elif article.status == "published":
            article.published_at = None
        article.status = new_status

    if category_ids is not None:
        kept = [link for link in article.category_links if link.category_id in category_ids]
        kept_ids = {link.category_id for link in kept}
        article.category_links = kept + [
            ArticleCategory(article_id=article.id, category_id=category_id)
            for category_id in category_ids if category_id not in kept_ids
        ]

    db.commit()
    db.refresh(article)

    return ArticleMutationResponse(
        data=ArticleResponse.model_validate(article),
        message="Article updated successfully",
    )


@router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_article(
    article_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Delete article (author or admin)
    """
    article = get_article_or_404(db, article_id)
    require_article_owner(article, current_user)

    db.delete(article)
    db.commit()

    logger.info(f"Article {article_id} deleted by user {current_user.id}")
    return None
