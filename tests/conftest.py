"""
Fixtures compartilhadas para testes.

Cada teste recebe um banco SQLite em memória novo (aiosqlite + StaticPool),
com o schema criado a partir dos models.
"""

import uuid
from datetime import date
from decimal import Decimal
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from circulation.db.session import Base, get_db
from circulation.main import app
from circulation.models import Book, BookCopy, Member, MemberType, Staff

TODAY = date(2024, 3, 1)


# ==========================================
# Event loop configuration
# ==========================================

@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


# ==========================================
# Database fixtures
# ==========================================

@pytest.fixture
async def test_engine():
    """Engine SQLite em memória compartilhado por todas as sessões do teste."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Sessão de banco para testes de service."""
    async with session_factory() as session:
        yield session


# ==========================================
# HTTP Client fixtures
# ==========================================

@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    Cliente HTTP assíncrono para testes.

    Substitui a dependency get_db para usar o banco em memória.
    """
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ==========================================
# Data factories
# ==========================================

class Factory:
    """Cria registros mínimos de catálogo e cadastro para os testes."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _tag() -> str:
        return uuid.uuid4().hex[:8].upper()

    async def _save(self, instance):
        self.db.add(instance)
        await self.db.commit()
        return instance

    async def member_type(self, **overrides) -> MemberType:
        data = {
            "type_name": f"Type-{self._tag()}",
            "max_books_allowed": 5,
            "loan_duration_days": 14,
            "fine_per_day": Decimal("0.50"),
            "membership_fee": Decimal("0.00"),
        }
        data.update(overrides)
        return await self._save(MemberType(**data))

    async def member(self, member_type: MemberType | None = None, **overrides) -> Member:
        if member_type is None:
            member_type = await self.member_type()
        tag = self._tag()
        data = {
            "member_number": f"M{tag}",
            "first_name": "Ada",
            "last_name": f"Reader{tag}",
            "email": f"reader_{tag.lower()}@test.com",
            "member_type_id": member_type.id,
            "registration_date": date(2020, 1, 1),
            "expiry_date": None,
            "is_active": True,
        }
        data.update(overrides)
        return await self._save(Member(**data))

    async def staff(self) -> Staff:
        tag = self._tag()
        return await self._save(
            Staff(
                employee_id=f"E{tag}",
                first_name="Desk",
                last_name=f"Clerk{tag}",
                email=f"staff_{tag.lower()}@test.com",
                position="Librarian",
            )
        )

    async def book(self, title: str = "Dom Casmurro") -> Book:
        return await self._save(Book(isbn=f"978-{self._tag()}", title=title))

    async def copy(self, book: Book | None = None, **overrides) -> BookCopy:
        if book is None:
            book = await self.book()
        tag = self._tag()
        data = {"book_id": book.id, "barcode": f"BC{tag}", "copy_number": tag}
        data.update(overrides)
        return await self._save(BookCopy(**data))


@pytest.fixture
def factory(test_db) -> Factory:
    return Factory(test_db)


@pytest.fixture
async def staff(factory) -> Staff:
    return await factory.staff()
