"""
Shared fixtures

Each test gets its own in-memory SQLite database (StaticPool, foreign keys
enforced). API tests go through httpx against the ASGI app with get_db
overridden to the test database.
"""
import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["ENVIRONMENT"] = "test"

import itertools
from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from learnpath.database import enable_sqlite_foreign_keys, get_db, init_db
from learnpath.main import app
from learnpath.orm.category import Category
from learnpath.orm.content import Content, ContentType
from learnpath.orm.learning_path import LearningPath
from learnpath.orm.node import Node
from learnpath.orm.question import Question
from learnpath.orm.user import UserRole
from learnpath.rbac import create_access_token
from learnpath.services import user_service

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# =============================================================================
# Database
# =============================================================================

@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    await init_db(bind=engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for service-level tests."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app and the test database."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# =============================================================================
# Users
# =============================================================================

def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest_asyncio.fixture
async def make_user(session_factory):
    """Factory: await make_user(UserRole.TEACHER) -> persisted User."""
    counter = itertools.count(1)

    async def _make(role: UserRole = UserRole.STUDENT, email: str = None, password: str = "password123", name: str = "Test User"):
        email = email or f"{role.value.lower()}{next(counter)}@example.com"
        async with session_factory() as session:
            return await user_service.create_user(session, email, password, name, role)

    return _make


@pytest_asyncio.fixture
async def admin(make_user):
    return await make_user(UserRole.ADMIN)


@pytest_asyncio.fixture
async def teacher(make_user):
    return await make_user(UserRole.TEACHER)


@pytest_asyncio.fixture
async def student(make_user):
    return await make_user(UserRole.STUDENT)


@pytest_asyncio.fixture
async def admin_headers(admin):
    return auth_headers(admin)


@pytest_asyncio.fixture
async def teacher_headers(teacher):
    return auth_headers(teacher)


@pytest_asyncio.fixture
async def student_headers(student):
    return auth_headers(student)


# =============================================================================
# Catalog data
# =============================================================================

@pytest_asyncio.fixture
async def seed(session_factory):
    """
    Factory that inserts rows directly and returns them.

        category = await seed.category()
        path = await seed.path(category.id)
        a = await seed.node(path.id, "A", order=1)
    """
    class Seeder:
        async def _add(self, obj):
            async with session_factory() as session:
                session.add(obj)
                await session.commit()
            return obj

        async def category(self, name="Programming", slug=None):
            return await self._add(Category(name=name, slug=slug or name.lower().replace(" ", "-")))

        async def path(self, category_id, title="Python Basics", order=0, difficulty=None):
            return await self._add(LearningPath(title=title, category_id=category_id, order=order, difficulty=difficulty))

        async def node(self, path_id, title, order=0, parent_id=None, content_id=None):
            return await self._add(Node(title=title, path_id=path_id, order=order, parent_id=parent_id, content_id=content_id))

        async def content(self, type=ContentType.ARTICLE, title="Lesson", **fields):
            if type == ContentType.ARTICLE:
                fields.setdefault("article_text", "Body text")
            if type == ContentType.VIDEO:
                fields.setdefault("video_url", "https://videos.example.com/intro.mp4")
            return await self._add(Content(type=type, title=title, **fields))

        async def question(self, content_id, correct_answer=0, options=None, explanation=None):
            return await self._add(Question(
                content_id=content_id,
                question="Which option is right?",
                options=options or ["first", "second", "third"],
                correct_answer=correct_answer,
                explanation=explanation,
            ))

    return Seeder()
