"""
Pydantic schemas
"""
from knowledge_base.schemas.common import BreadcrumbItem, PaginationMeta, AuthorSummary
from knowledge_base.schemas.user import (
    UserBase, UserCreate, UserResponse, ProfileUpdate, RoleUpdate, PasswordChange, Token, TokenData
)
from knowledge_base.schemas.category import (
    CategoryCreate, CategoryUpdate, CategoryResponse, CategorySummary,
    CategoryDetailResponse, CategoryListResponse, CategoryTreeNode,
    MoveArticlesRequest, MoveArticlesResponse
)
from knowledge_base.schemas.article import (
    ArticleCreate, ArticleUpdate, ArticleFilters, ArticleSummary, ArticleListResponse,
    ArticleResponse, ArticleDetailResponse, ArticleMutationResponse
)
from knowledge_base.schemas.question import (
    QuestionCreate, QuestionUpdate, AnswerCreate, AnswerUpdate,
    AnswerResponse, QuestionResponse, QuestionDetailResponse, QuestionListResponse
)
from knowledge_base.schemas.import_job import ImportJobResponse, ImportJobListResponse
from knowledge_base.schemas.search import SearchResult, SearchResponse
from knowledge_base.schemas.admin import CleanupRequest, CleanupResponse

__all__ = [
    # Common
    "BreadcrumbItem", "PaginationMeta", "AuthorSummary",
    # User
    "UserBase", "UserCreate", "UserResponse", "ProfileUpdate", "RoleUpdate", "PasswordChange",
    "Token", "TokenData",
    # Category
    "CategoryCreate", "CategoryUpdate", "CategoryResponse", "CategorySummary",
    "CategoryDetailResponse", "CategoryListResponse", "CategoryTreeNode",
    "MoveArticlesRequest", "MoveArticlesResponse",
    # Article
    "ArticleCreate", "ArticleUpdate", "ArticleFilters", "ArticleSummary", "ArticleListResponse",
    "ArticleResponse", "ArticleDetailResponse", "ArticleMutationResponse",
    # Q&A
    "QuestionCreate", "QuestionUpdate", "AnswerCreate", "AnswerUpdate",
    "AnswerResponse", "QuestionResponse", "QuestionDetailResponse", "QuestionListResponse",
    # Import jobs
    "ImportJobResponse", "ImportJobListResponse",
    # Search
    "SearchResult", "SearchResponse",
    # Admin
    "CleanupRequest", "CleanupResponse",
]
