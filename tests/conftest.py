"""
Pytest configuration and fixtures
"""
import os

# Must be set before the application modules read their settings
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ALLOWED_EMAIL_DOMAIN"] = "@inbound.no"

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from knowledge_base.database import Base, SessionLocal, engine
from knowledge_base.main import app
from knowledge_base.models import Article, ArticleCategory, Category, Question, Answer, ImportJob, User
from knowledge_base.services.auth import create_access_token, get_password_hash
from knowledge_base.services.rate_limiter import RateLimiter, get_rate_limiter

TEST_PASSWORD = "password123"


class FakeClock:
    """Manually advanced clock for rate limiter tests"""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture(scope="session")
def password_hash():
    """bcrypt is slow, hash the shared test password once"""
    return get_password_hash(TEST_PASSWORD)


@pytest.fixture
def db_session():
    """Create tables and yield a session on the shared in-memory database"""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    yield session

    # Cleanup
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def rate_limiter(fake_clock):
    return RateLimiter(clock=fake_clock)


@pytest.fixture
def client(db_session, rate_limiter):
    """Test client with a fresh rate limiter driven by the fake clock"""
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create_user(session, password_hash, email, full_name, role="member"):
    user = User(email=email, password_hash=password_hash, full_name=full_name, role=role, is_active=True)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": user.email, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_user(db_session, password_hash):
    return _create_user(db_session, password_hash, "admin@inbound.no", "Ada Admin", role="admin")


@pytest.fixture
def member_user(db_session, password_hash):
    return _create_user(db_session, password_hash, "member@inbound.no", "Mona Member")


@pytest.fixture
def other_user(db_session, password_hash):
    return _create_user(db_session, password_hash, "other@inbound.no", "Otto Other")


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def member_headers(member_user):
    return auth_headers(member_user)


@pytest.fixture
def other_headers(other_user):
    return auth_headers(other_user)


@pytest.fixture
def make_category(db_session):
    """Factory creating categories directly in the database"""

    def factory(name, parent=None, sort_order=0, slug=None):
        category = Category(
            name=name,
            slug=slug or name.lower().replace(" ", "-"),
            parent_id=parent.id if parent is not None else None,
            sort_order=sort_order,
        )
        db_session.add(category)
        db_session.commit()
        db_session.refresh(category)
        return category

    return factory


def text_document(*paragraphs):
    return {
        "type": "doc",
        "content": [
            {"type": "paragraph", "content": [{"type": "text", "text": text}]}
            for text in paragraphs
        ],
    }


@pytest.fixture
def make_article(db_session):
    """Factory creating articles directly in the database"""
    counter = {"value": 0}

    def factory(title, author, categories=(), status="published", body="", excerpt=None, published_at=None):
        counter["value"] += 1
        if status == "published" and published_at is None:
            published_at = datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(days=counter["value"])
        article = Article(
            title=title,
            slug=f"{title.lower().replace(' ', '-')}-{counter['value']}",
            content=text_document(body or title),
            excerpt=excerpt,
            status=status,
            author_id=author.id,
            published_at=published_at,
        )
        db_session.add(article)
        db_session.flush()
        for category in categories:
            db_session.add(ArticleCategory(article_id=article.id, category_id=category.id))
        db_session.commit()
        db_session.refresh(article)
        return article

    return factory


@pytest.fixture
def make_question(db_session):
    def factory(title, author, body="Question body", answered=False):
        question = Question(title=title, body=body, author_id=author.id, is_answered=answered)
        db_session.add(question)
        db_session.commit()
        db_session.refresh(question)
        return question

    return factory


@pytest.fixture
def make_answer(db_session):
    def factory(question, author, content="Answer text", accepted=False):
        answer = Answer(question_id=question.id, author_id=author.id, content=content, is_accepted=accepted)
        db_session.add(answer)
        db_session.commit()
        db_session.refresh(answer)
        return answer

    return factory


@pytest.fixture
def make_import_job(db_session):
    def factory(creator, file_name="articles.csv", status="pending", stats=None, errors=None):
        job = ImportJob(
            created_by=creator.id,
            file_name=file_name,
            status=status,
            stats=stats or {"total": 0, "success": 0, "failed": 0},
            errors=errors,
        )
        db_session.add(job)
        db_session.commit()
        db_session.refresh(job)
        return job

    return factory


# Test markers
def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
