"""
Breadcrumb builder
"""
from typing import Dict, List, Optional
from knowledge_base.models.category import Category
from knowledge_base.schemas.common import BreadcrumbItem
from knowledge_base.services.category_tree import MAX_CATEGORY_DEPTH, CategoryIntegrityError


def category_href(category_id: int) -> str:
    return f"/categories/{category_id}"


def category_path(category_id: int, categories_by_id: Dict[int, Category]) -> List[Category]:
    """
    Root-to-leaf chain of categories ending at category_id

    Args:
        category_id: Leaf category
        categories_by_id: Lookup of every category by id

    Returns:
        depth(leaf) + 1 categories, leaf last

    Raises:
        CategoryIntegrityError: Missing category or a parent chain longer than allowed
    """
    path: List[Category] = []
    current_id: Optional[int] = category_id
    while current_id is not None:
        if len(path) > MAX_CATEGORY_DEPTH:
            raise CategoryIntegrityError(category_id, f"Category {category_id} has a parent chain that is too deep")
        category = categories_by_id.get(current_id)
        if category is None:
            raise CategoryIntegrityError(category_id, f"Category {current_id} not found in the chain of {category_id}")
        path.append(category)
        current_id = category.parent_id
    path.reverse()
    return path


def build_breadcrumbs(
    path: List[Category],
    current_label: str,
    current_href: Optional[str] = None,
) -> List[BreadcrumbItem]:
    """
    Breadcrumbs for a page below a category path

    Each category links to its page; the current page is the terminal item.
    """
    items = [BreadcrumbItem(label=category.name, href=category_href(category.id)) for category in path]
    items.append(BreadcrumbItem(label=current_label, href=current_href))
    return items
