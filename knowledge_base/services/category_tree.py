"""
Category hierarchy

Categories form a forest at most three levels deep: root (depth 0),
child (depth 1) and grandchild (depth 2). Every walk along parent_id is
bounded by MAX_CATEGORY_DEPTH, so corrupt rows (cycles, overlong chains,
dangling parents) surface as CategoryIntegrityError instead of hanging.
"""
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set
from knowledge_base.models.category import Category
from knowledge_base.schemas.category import CategoryTreeNode

logger = logging.getLogger(__name__)

MAX_CATEGORY_DEPTH = 2
MAX_CATEGORY_LEVELS = MAX_CATEGORY_DEPTH + 1


class CategoryIntegrityError(Exception):
    """Raised when stored parent links do not form a valid tree"""

    def __init__(self, category_id: Optional[int], message: str):
        super().__init__(message)
        self.category_id = category_id


def category_sort_key(category: Category):
    # id keeps siblings with equal sort_order and name in a stable order
    return (category.sort_order or 0, category.name or "", category.id or 0)


def parent_map(categories: Iterable[Category]) -> Dict[int, Optional[int]]:
    return {category.id: category.parent_id for category in categories}


def children_map(categories: Iterable[Category]) -> Dict[Optional[int], List[Category]]:
    """Group categories by parent_id, each group sorted by (sort_order, name)"""
    groups: Dict[Optional[int], List[Category]] = defaultdict(list)
    for category in categories:
        groups[category.parent_id].append(category)
    for siblings in groups.values():
        siblings.sort(key=category_sort_key)
    return groups


def category_depth(category_id: int, parent_of: Dict[int, Optional[int]]) -> int:
    """
    Compute the depth of a category (root = 0)

    Args:
        category_id: Category to measure
        parent_of: Mapping of category id -> parent id

    Returns:
        Depth between 0 and MAX_CATEGORY_DEPTH

    Raises:
        CategoryIntegrityError: Unknown id, dangling parent, or a chain
            longer than MAX_CATEGORY_DEPTH (which includes every cycle)
    """
    if category_id not in parent_of:
        raise CategoryIntegrityError(category_id, f"Category {category_id} does not exist")

    depth = 0
    current = parent_of[category_id]
    while current is not None:
        depth += 1
        if depth > MAX_CATEGORY_DEPTH:
            raise CategoryIntegrityError(
                category_id,
                f"Category {category_id} exceeds the maximum depth of {MAX_CATEGORY_LEVELS} levels or has a cyclic parent chain",
            )
        if current not in parent_of:
            raise CategoryIntegrityError(category_id, f"Category {category_id} references missing parent {current}")
        current = parent_of[current]
    return depth


def descendant_ids(category_id: int, children_of: Dict[Optional[int], List[Category]]) -> Set[int]:
    """All ids below a category (not including itself)"""
    found: Set[int] = set()
    frontier = [category_id]
    while frontier:
        next_frontier = []
        for node_id in frontier:
            for child in children_of.get(node_id, []):
                if child.id not in found and child.id != category_id:
                    found.add(child.id)
                    next_frontier.append(child.id)
        frontier = next_frontier
    return found


def subtree_height(category_id: int, children_of: Dict[Optional[int], List[Category]]) -> int:
    """Number of levels below a category (0 for a leaf)"""
    height = 0
    seen = {category_id}
    frontier = [category_id]
    while True:
        next_frontier = []
        for node_id in frontier:
            for child in children_of.get(node_id, []):
                if child.id not in seen:
                    seen.add(child.id)
                    next_frontier.append(child.id)
        if not next_frontier:
            return height
        height += 1
        frontier = next_frontier


def valid_categories(categories: List[Category]) -> List[Category]:
    """Drop (and log) categories whose parent chain is not a valid tree path"""
    parent_of = parent_map(categories)
    result = []
    for category in categories:
        try:
            category_depth(category.id, parent_of)
        except CategoryIntegrityError as exc:
            logger.warning(f"Skipping category {category.id}: {exc}")
            continue
        result.append(category)
    return result


def build_category_tree(
    categories: List[Category],
    article_counts: Optional[Dict[int, int]] = None,
) -> List[CategoryTreeNode]:
    """
    Build a depth-annotated forest from a flat category list

    Input order does not matter. Siblings are sorted by (sort_order, name).

    Args:
        categories: All categories, in any order
        article_counts: Optional mapping of category id -> article count

    Returns:
        Root nodes with nested children
    """
    children_of = children_map(valid_categories(categories))
    counts = article_counts or {}

    def build(parent_id: Optional[int], depth: int) -> List[CategoryTreeNode]:
        return [
            CategoryTreeNode(
                id=category.id,
                name=category.name,
                slug=category.slug,
                description=category.description,
                parent_id=category.parent_id,
                sort_order=category.sort_order or 0,
                depth=depth,
                article_count=counts.get(category.id, 0),
                children=build(category.id, depth + 1),
            )
            for category in children_of.get(parent_id, [])
        ]

    return build(None, 0)
