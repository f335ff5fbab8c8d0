"""
Categories router
"""
import logging
from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session
from knowledge_base.database import get_db
from knowledge_base.schemas.category import (
    CategoryCreate, CategoryUpdate, CategoryResponse, CategorySummary, CategoryArticleSummary,
    CategoryDetailResponse, CategoryListResponse, CategoryTreeNode,
    MoveArticlesRequest, MoveArticlesResponse
)
from knowledge_base.services.auth import get_current_active_admin
from knowledge_base.services.breadcrumbs import build_breadcrumbs, category_path
from knowledge_base.services.category_tree import (
    CategoryIntegrityError, build_category_tree, category_sort_key
)
from knowledge_base.services.category_validator import CategoryValidationError, validate_category
from knowledge_base.models.user import User
from knowledge_base.models.category import Category
from knowledge_base.models.article import Article, ArticleCategory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/categories", tags=["Categories"])


def article_counts(db: Session) -> Dict[int, int]:
    """category id -> number of linked articles"""
    rows = (
        db.query(ArticleCategory.category_id, func.count(ArticleCategory.article_id))
        .group_by(ArticleCategory.category_id)
        .all()
    )
    return {category_id: count for category_id, count in rows}


def get_category_or_404(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found"
        )
    return category


def _raise_validation(exc: CategoryValidationError):
    raise HTTPException(status_code=exc.status_code, detail=exc.to_detail())


def _parse_parent(parent: Optional[str]):
    """Returns (filter requested, parent id) for the ?parent= query value"""
    if parent is None or not parent.strip():
        return False, None
    value = parent.strip().lower()
    if value in ("root", "null"):
        return True, None
    try:
        return True, int(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Validation failed", "errors": {"parent": "Must be 'root', 'null' or a category id"}},
        )


@router.get("", response_model=CategoryListResponse)
async def list_categories(
    parent: Optional[str] = None,
    count: bool = False,
    db: Session = Depends(get_db)
):
    """
    List categories ordered by (sort_order, name)

    ?parent=root (or null) returns top-level categories, ?parent=<id> the
    children of that category. ?count=true adds article_count.
    """
    query = db.query(Category)
    filtered, parent_id = _parse_parent(parent)
    if filtered:
        query = query.filter(Category.parent_id.is_(None) if parent_id is None else Category.parent_id == parent_id)

    categories = sorted(query.all(), key=category_sort_key)
    counts = article_counts(db) if count else None

    data = []
    for category in categories:
        item = CategoryResponse.model_validate(category)
        if counts is not None:
            item.article_count = counts.get(category.id, 0)
        data.append(item)
    return CategoryListResponse(data=data, count=len(data))


@router.get("/tree", response_model=List[CategoryTreeNode])
async def get_category_tree(db: Session = Depends(get_db)):
    """
    Full category hierarchy with depth annotations and article counts
    """
    return build_category_tree(db.query(Category).all(), article_counts(db))


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    current_user: User = Depends(get_current_active_admin),
    db: Session = Depends(get_db)
):
    """
    Create new category (admin only)
    """
    try:
        values = validate_category(category_data.model_dump(), db.query(Category).all())
    except CategoryValidationError as exc:
        _raise_validation(exc)

    new_category = Category(**values)
    db.add(new_category)
    db.commit()
    db.refresh(new_category)

    logger.info(f"Category {new_category.id} '{new_category.name}' created by user {current_user.id}")
    return CategoryResponse.model_validate(new_category)


@router.get("/{category_id}", response_model=CategoryDetailResponse)
async def get_category(
    category_id: int,
    articles: bool = False,
    db: Session = Depends(get_db)
):
    """
    Get category with parent, subcategories, counts and breadcrumbs

    ?articles=true includes the published articles in this category.
    """
    category = get_category_or_404(db, category_id)
    all_categories = db.query(Category).all()
    categories_by_id = {c.id: c for c in all_categories}

    try:
        path = category_path(category.id, categories_by_id)
    except CategoryIntegrityError as exc:
        logger.error(f"Category hierarchy error for {category_id}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Category hierarchy is invalid"
        )

    subcategories = sorted(
        (c for c in all_categories if c.parent_id == category.id),
        key=category_sort_key,
    )
    article_count = db.query(ArticleCategory).filter(ArticleCategory.category_id == category.id).count()

    detail = CategoryDetailResponse.model_validate(category)
    detail.article_count = article_count
    detail.subcategory_count = len(subcategories)
    detail.depth = len(path) - 1
    detail.subcategories = [CategoryResponse.model_validate(c) for c in subcategories]
    if category.parent_id is not None:
        detail.parent = CategorySummary.model_validate(categories_by_id[category.parent_id])
    detail.breadcrumbs = build_breadcrumbs(path[:-1], category.name)

    if articles:
        rows = (
            db.query(Article)
            .join(ArticleCategory, ArticleCategory.article_id == Article.id)
            .filter(ArticleCategory.category_id == category.id, Article.status == "published")
            .order_by(Article.published_at.desc(), Article.id.desc())
            .all()
        )
        detail.articles = [CategoryArticleSummary.model_validate(a) for a in rows]

    return detail


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    current_user: User = Depends(get_current_active_admin),
    db: Session = Depends(get_db)
):
    """
    Update category (admin only)
    """
    category = get_category_or_404(db, category_id)

    try:
        values = validate_category(
            category_data.model_dump(exclude_unset=True),
            db.query(Category).all(),
            category_id=category.id,
        )
    except CategoryValidationError as exc:
        _raise_validation(exc)

    for field, value in values.items():
        setattr(category, field, value)

    db.commit()
    db.refresh(category)

    return CategoryResponse.model_validate(category)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: int,
    current_user: User = Depends(get_current_active_admin),
    db: Session = Depends(get_db)
):
    """
    Delete category (admin only)

    Categories that still have articles or subcategories cannot be deleted.
    """
    category = get_category_or_404(db, category_id)

    article_count = db.query(ArticleCategory).filter(ArticleCategory.category_id == category.id).count()
    if article_count:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot delete category with {article_count} article(s). Move or remove them first."
        )
    subcategory_count = db.query(Category).filter(Category.parent_id == category.id).count()
    if subcategory_count:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot delete category with {subcategory_count} subcategory(ies). Delete them first."
        )

    db.delete(category)
    db.commit()

    logger.info(f"Category {category_id} deleted by user {current_user.id}")
    return None


@router.post("/{category_id}/move-articles", response_model=MoveArticlesResponse)
async def move_articles(
    category_id: int,
    move_data: MoveArticlesRequest,
    current_user: User = Depends(get_current_active_admin),
    db: Session = Depends(get_db)
):
    """
    Move every article from this category to another (admin only)

    Each article is moved and committed on its own; a failure part-way
    leaves the articles moved so far in the target category.
    """
    source = get_category_or_404(db, category_id)
    if move_data.target_category_id == source.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Source and target categories must differ"
        )
    target = db.query(Category).filter(Category.id == move_data.target_category_id).first()
    if not target:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Target category not found"
        )

    links = db.query(ArticleCategory).filter(ArticleCategory.category_id == source.id).all()
    if not links:
        return MoveArticlesResponse(
            message="No articles to move",
            moved_count=0,
            source_category=source.name,
            target_category=target.name,
        )

    already_in_target = {
        article_id for (article_id,) in
        db.query(ArticleCategory.article_id).filter(ArticleCategory.category_id == target.id).all()
    }

    moved = 0
    for link in links:
        if link.article_id not in already_in_target:
            db.add(ArticleCategory(article_id=link.article_id, category_id=target.id))
        db.delete(link)
        db.commit()
        moved += 1

    logger.info(f"Moved {moved} article(s) from category {source.id} to {target.id}")
    return MoveArticlesResponse(
        message=f"Moved {moved} article(s) to {target.name}",
        moved_count=moved,
        source_category=source.name,
        target_category=target.name,
    )
