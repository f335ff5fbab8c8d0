"""
Database models
"""
from knowledge_base.models.user import User
from knowledge_base.models.category import Category
from knowledge_base.models.article import Article, ArticleCategory
from knowledge_base.models.question import Question, Answer
from knowledge_base.models.import_job import ImportJob

__all__ = [
    "User",
    "Category",
    "Article",
    "ArticleCategory",
    "Question",
    "Answer",
    "ImportJob",
]
