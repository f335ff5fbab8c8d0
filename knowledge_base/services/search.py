"""
Full-text search service

On PostgreSQL ranking is delegated to the search_content() SQL function
installed by init_db(). Other databases (SQLite in development and tests)
use a portable term-match ranking that returns the same result shape.
"""
import logging
import re
from typing import Dict, List, Optional
from sqlalchemy import String, cast, or_, text
from sqlalchemy.orm import Session
from knowledge_base.models.article import Article
from knowledge_base.models.question import Question, Answer
from knowledge_base.services.content import extract_plain_text, truncate

logger = logging.getLogger(__name__)

SEARCH_RESULT_LIMIT = 50
EXCERPT_LENGTH = 200
TITLE_WEIGHT = 1.0
BODY_WEIGHT = 0.4
CONTENT_TYPES = {"all": None, "articles": "article", "questions": "question"}

POSTGRES_SEARCH_FUNCTION = """
CREATE OR REPLACE FUNCTION search_content(search_query text)
RETURNS TABLE (
    type text,
    id integer,
    title text,
    excerpt text,
    rank real,
    created_at timestamptz
)
LANGUAGE sql STABLE AS $$
    WITH query AS (
        SELECT plainto_tsquery('english', search_query) AS q
    ),
    matches AS (
        SELECT 'article'::text AS type, a.id, a.title::text,
               COALESCE(a.excerpt, left(a.content::text, 200)) AS excerpt,
               ts_rank(
                   setweight(to_tsvector('english', a.title), 'A') ||
                   setweight(to_tsvector('english', COALESCE(a.excerpt, '')), 'B') ||
                   setweight(to_tsvector('english', a.content::text), 'C'),
                   query.q
               ) AS rank,
               a.created_at
        FROM articles a, query
        WHERE a.status = 'published'
          AND (
              setweight(to_tsvector('english', a.title), 'A') ||
              setweight(to_tsvector('english', COALESCE(a.excerpt, '')), 'B') ||
              setweight(to_tsvector('english', a.content::text), 'C')
          ) @@ query.q
        UNION ALL
        SELECT 'question'::text, q.id, q.title::text, left(q.body, 200),
               ts_rank(
                   setweight(to_tsvector('english', q.title), 'A') ||
                   setweight(to_tsvector('english', q.body), 'B'),
                   query.q
               ),
               q.created_at
        FROM questions q, query
        WHERE (
            setweight(to_tsvector('english', q.title), 'A') ||
            setweight(to_tsvector('english', q.body), 'B')
        ) @@ query.q
        UNION ALL
        SELECT 'question'::text, q.id, q.title::text, left(ans.content, 200),
               ts_rank(to_tsvector('english', ans.content), query.q) * 0.8,
               q.created_at
        FROM answers ans JOIN questions q ON q.id = ans.question_id, query
        WHERE to_tsvector('english', ans.content) @@ query.q
    )
    SELECT DISTINCT ON (type, id) type, id, title, excerpt, rank, created_at
    FROM matches
    ORDER BY type, id, rank DESC
$$;
"""


def search_terms(query: str) -> List[str]:
    """Lowercased word tokens of a query, duplicates removed"""
    terms = []
    for term in re.findall(r"\w+", (query or "").lower()):
        if term not in terms:
            terms.append(term)
    return terms


def _term_score(terms: List[str], title: str, body: str) -> Optional[float]:
    """Every term must appear in title or body; None when one does not"""
    title = (title or "").lower()
    body = (body or "").lower()
    score = 0.0
    for term in terms:
        in_title = term in title
        in_body = term in body
        if not in_title and not in_body:
            return None
        if in_title:
            score += TITLE_WEIGHT
        if in_body:
            score += BODY_WEIGHT
    return score / (score + 1)


class SearchService:
    """Search published articles and Q&A content"""

    def search_content(
        self,
        db: Session,
        query: str,
        content_type: str = "all",
        limit: Optional[int] = SEARCH_RESULT_LIMIT,
    ) -> List[dict]:
        """
        Ranked search across articles and questions

        Args:
            db: Database session
            query: Raw search string
            content_type: "all", "articles" or "questions"
            limit: Maximum number of results (None for no limit)

        Returns:
            Result dicts {type, id, title, excerpt, rank, created_at, url},
            best match first
        """
        if content_type not in CONTENT_TYPES:
            raise ValueError(f"Unknown content type: {content_type}")
        if not search_terms(query):
            return []

        if db.get_bind().dialect.name == "postgresql":
            rows = self._search_postgres(db, query)
        else:
            rows = self._search_portable(db, query)

        wanted = CONTENT_TYPES[content_type]
        if wanted:
            rows = [row for row in rows if row["type"] == wanted]
        rows = self._dedupe(rows)
        rows.sort(key=lambda row: (row["rank"], row["created_at"].timestamp() if row["created_at"] else 0), reverse=True)
        if limit is not None:
            rows = rows[:limit]
        for row in rows:
            row["url"] = result_url(row["type"], row["id"])
        return rows

    def rank_articles(self, db: Session, query: str) -> Dict[int, float]:
        """article id -> rank for published articles matching query"""
        results = self.search_content(db, query, content_type="articles", limit=None)
        return {row["id"]: row["rank"] for row in results}

    def _search_postgres(self, db: Session, query: str) -> List[dict]:
        result = db.execute(
            text("SELECT type, id, title, excerpt, rank, created_at FROM search_content(:query)"),
            {"query": query},
        )
        return [
            {
                "type": row.type,
                "id": row.id,
                "title": row.title,
                "excerpt": row.excerpt or "",
                "rank": float(row.rank or 0),
                "created_at": row.created_at,
            }
            for row in result
        ]

    def _search_portable(self, db: Session, query: str) -> List[dict]:
        terms = search_terms(query)
        rows: List[dict] = []

        article_filters = [
            or_(
                Article.title.ilike(f"%{term}%"),
                Article.excerpt.ilike(f"%{term}%"),
                cast(Article.content, String).ilike(f"%{term}%"),
            )
            for term in terms
        ]
        articles = db.query(Article).filter(Article.status == "published", *article_filters).all()
        for article in articles:
            plain_text = extract_plain_text(article.content)
            rank = _term_score(terms, article.title, f"{article.excerpt or ''} {plain_text}")
            if rank is None:
                continue
            rows.append({
                "type": "article",
                "id": article.id,
                "title": article.title,
                "excerpt": article.excerpt or truncate(plain_text, EXCERPT_LENGTH),
                "rank": rank,
                "created_at": article.created_at,
            })

        question_filters = [
            or_(Question.title.ilike(f"%{term}%"), Question.body.ilike(f"%{term}%"))
            for term in terms
        ]
        for question in db.query(Question).filter(*question_filters).all():
            rank = _term_score(terms, question.title, question.body)
            if rank is None:
                continue
            rows.append({
                "type": "question",
                "id": question.id,
                "title": question.title,
                "excerpt": truncate(question.body, EXCERPT_LENGTH),
                "rank": rank,
                "created_at": question.created_at,
            })

        answer_filters = [Answer.content.ilike(f"%{term}%") for term in terms]
        for answer in db.query(Answer).filter(*answer_filters).all():
            rank = _term_score(terms, "", answer.content)
            if rank is None:
                continue
            question = answer.question
            rows.append({
                "type": "question",
                "id": question.id,
                "title": question.title,
                "excerpt": truncate(answer.content, EXCERPT_LENGTH),
                "rank": rank * 0.8,
                "created_at": question.created_at,
            })

        logger.debug(f"Portable search for {query!r} matched {len(rows)} rows")
        return rows

    @staticmethod
    def _dedupe(rows: List[dict]) -> List[dict]:
        """Keep the best-ranked row per (type, id)"""
        best: Dict[tuple, dict] = {}
        for row in rows:
            key = (row["type"], row["id"])
            if key not in best or row["rank"] > best[key]["rank"]:
                best[key] = row
        return list(best.values())


def result_url(result_type: str, result_id: int) -> str:
    if result_type == "article":
        return f"/articles/{result_id}"
    return f"/qa/questions/{result_id}"


search_service = SearchService()
