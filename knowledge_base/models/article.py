"""
Article and article-category association models
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from knowledge_base.database import Base

ARTICLE_STATUSES = ("draft", "published", "archived")


def empty_document() -> dict:
    return {"type": "doc", "content": []}


class Article(Base):
    """Knowledge base article"""
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    content = Column(JSON, nullable=False, default=empty_document)  # rich text document
    excerpt = Column(Text)
    status = Column(String(20), nullable=False, default="draft", index=True)  # draft, published, archived
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    published_at = Column(DateTime(timezone=True))
    view_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    author = relationship("User", back_populates="articles")
    category_links = relationship(
        "ArticleCategory",
        back_populates="article",
        cascade="all, delete-orphan",
        order_by="ArticleCategory.created_at",
    )

    @property
    def categories(self):
        return [link.category for link in self.category_links]


class ArticleCategory(Base):
    """Many-to-many link between articles and categories"""
    __tablename__ = "article_categories"

    article_id = Column(Integer, ForeignKey("articles.id", ondelete="CASCADE"), primary_key=True, index=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    article = relationship("Article", back_populates="category_links")
    category = relationship("Category", back_populates="article_links")
