"""
Category validation

Checks a create/update payload against the current set of categories and
returns the cleaned values, or raises CategoryValidationError with
field-level messages.
"""
import re
from typing import Any, Dict, List, Optional
from knowledge_base.models.category import Category
from knowledge_base.services.category_tree import (
    MAX_CATEGORY_DEPTH,
    MAX_CATEGORY_LEVELS,
    CategoryIntegrityError,
    category_depth,
    children_map,
    descendant_ids,
    parent_map,
    subtree_height,
)
from knowledge_base.services.content import slugify

NAME_MAX_LENGTH = 100
SLUG_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 500
SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")


class CategoryValidationError(Exception):
    """
    Field-level validation failure

    Attributes:
        errors: field -> message for ordinary validation errors
        conflicts: field -> message for uniqueness collisions
    """

    def __init__(self, errors: Dict[str, str], conflicts: Optional[Dict[str, str]] = None):
        self.errors = errors
        self.conflicts = conflicts or {}
        super().__init__("Validation failed")

    @property
    def status_code(self) -> int:
        return 409 if self.conflicts and not self.errors else 400

    @property
    def message(self) -> str:
        return "Category already exists" if self.status_code == 409 else "Validation failed"

    def to_detail(self) -> dict:
        return {"message": self.message, "errors": {**self.errors, **self.conflicts}}


def validate_category(
    payload: Dict[str, Any],
    categories: List[Category],
    category_id: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Validate a category create (category_id is None) or update payload

    On update only the keys present in payload are checked; the rest keep
    their stored values.

    Args:
        payload: Submitted fields
        categories: Every existing category
        category_id: Id of the category being updated

    Returns:
        Cleaned values for the submitted fields (plus a generated slug on create)

    Raises:
        CategoryValidationError: On any field error or slug collision
    """
    is_create = category_id is None
    errors: Dict[str, str] = {}
    conflicts: Dict[str, str] = {}
    cleaned: Dict[str, Any] = {}

    # Name
    if is_create or "name" in payload:
        name = (payload.get("name") or "").strip()
        if not name:
            errors["name"] = "Name is required"
        elif len(name) > NAME_MAX_LENGTH:
            errors["name"] = f"Name must be {NAME_MAX_LENGTH} characters or less"
        cleaned["name"] = name

    # Slug
    if is_create or "slug" in payload:
        slug = (payload.get("slug") or "").strip()
        if not slug and is_create:
            slug = slugify(cleaned.get("name", ""))
        if not slug:
            errors["slug"] = "Slug is required"
        elif len(slug) > SLUG_MAX_LENGTH:
            errors["slug"] = f"Slug must be {SLUG_MAX_LENGTH} characters or less"
        elif not SLUG_PATTERN.match(slug):
            errors["slug"] = "Slug must contain only lowercase letters, numbers, and hyphens"
        elif any(c.slug == slug and c.id != category_id for c in categories):
            conflicts["slug"] = "A category with this slug already exists"
        cleaned["slug"] = slug

    # Description
    if "description" in payload:
        description = payload.get("description")
        description = description.strip() if description else None
        if description and len(description) > DESCRIPTION_MAX_LENGTH:
            errors["description"] = f"Description must be {DESCRIPTION_MAX_LENGTH} characters or less"
        cleaned["description"] = description or None

    if "sort_order" in payload and payload["sort_order"] is not None:
        if payload["sort_order"] < 0:
            errors["sort_order"] = "Sort order must be zero or greater"
        cleaned["sort_order"] = payload["sort_order"]

    # Parent
    if "parent_id" in payload:
        parent_id = payload.get("parent_id")
        parent_error = _check_parent(parent_id, categories, category_id)
        if parent_error:
            errors["parent_id"] = parent_error
        cleaned["parent_id"] = parent_id

    if errors or conflicts:
        raise CategoryValidationError(errors, conflicts)
    return cleaned


def _check_parent(parent_id: Optional[int], categories: List[Category], category_id: Optional[int]) -> Optional[str]:
    if parent_id is None:
        return None
    if category_id is not None and parent_id == category_id:
        return "Category cannot be its own parent"

    parent_of = parent_map(categories)
    if parent_id not in parent_of:
        return "Parent category not found"

    children_of = children_map(categories)
    if category_id is not None and parent_id in descendant_ids(category_id, children_of):
        return "Cannot move category to its own descendant"

    try:
        parent_depth = category_depth(parent_id, parent_of)
    except CategoryIntegrityError:
        return "Parent category has an invalid hierarchy"

    height = subtree_height(category_id, children_of) if category_id is not None else 0
    if parent_depth + 1 + height > MAX_CATEGORY_DEPTH:
        return f"Maximum category nesting depth ({MAX_CATEGORY_LEVELS} levels) would be exceeded"
    return None
