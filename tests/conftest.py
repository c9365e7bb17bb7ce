import os
import uuid
from typing import AsyncGenerator, Dict, List, Optional

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_JSON", "false")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.auth.security import create_access_token
from app.core.models import Agency, Designation, Employee, Role, User
from app.db.session import Base, get_db
from app.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture()
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory SQLite database per test, shared by every connection via StaticPool."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for a test and override FastAPI dependency."""
    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.clear()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class AgencyStaff:
    """Creates roles, employees and user accounts inside one agency."""

    def __init__(self, db: AsyncSession, agency: Agency) -> None:
        self.db = db
        self.agency = agency
        self._roles: Dict[str, Role] = {}
        self._designation: Optional[Designation] = None

    async def role(self, name: str, permissions: Optional[List[str]] = None) -> Role:
        if name not in self._roles:
            role = Role(agency_id=self.agency.id, name=name, permissions=permissions or [])
            self.db.add(role)
            await self.db.flush()
            self._roles[name] = role
        return self._roles[name]

    async def add(
        self,
        full_name: str,
        role_name: Optional[str],
        *,
        with_employee: bool = True,
        is_active: bool = True,
        permissions: Optional[List[str]] = None,
    ) -> User:
        if self._designation is None:
            self._designation = Designation(agency_id=self.agency.id, name="Security Officer")
            self.db.add(self._designation)

        role = await self.role(role_name, permissions) if role_name else None
        employee = None
        if with_employee:
            employee = Employee(
                agency_id=self.agency.id,
                full_name=full_name,
                email=f"{uuid.uuid4().hex[:8]}@agency.test",
                designation=self._designation,
            )
            self.db.add(employee)

        user = User(
            agency_id=self.agency.id,
            full_name=full_name,
            email=f"{uuid.uuid4().hex[:8]}@agency.test",
            role=role,
            employee=employee,
            is_active=is_active,
        )
        self.db.add(user)
        await self.db.commit()
        return user

    async def employee_without_login(self, full_name: str) -> Employee:
        employee = Employee(agency_id=self.agency.id, full_name=full_name)
        self.db.add(employee)
        await self.db.commit()
        return employee


async def _make_agency(db: AsyncSession, name: str) -> Agency:
    agency = Agency(name=name, slug=f"{name.lower().replace(' ', '-')}-{uuid.uuid4().hex[:6]}")
    db.add(agency)
    await db.commit()
    return agency


@pytest.fixture()
async def agency(db_session: AsyncSession) -> Agency:
    return await _make_agency(db_session, "Shield Security")


@pytest.fixture()
async def other_agency(db_session: AsyncSession) -> Agency:
    return await _make_agency(db_session, "Rival Guards")


@pytest.fixture()
def staff(db_session: AsyncSession, agency: Agency) -> AgencyStaff:
    return AgencyStaff(db_session, agency)


@pytest.fixture()
def other_staff(db_session: AsyncSession, other_agency: Agency) -> AgencyStaff:
    return AgencyStaff(db_session, other_agency)


@pytest.fixture()
def auth_headers():
    """Helper fixture to build bearer headers for a user."""

    def _auth_headers(user: User) -> Dict[str, str]:
        token = create_access_token(
            subject={
                "sub": user.id,
                "agency_id": user.agency_id,
                "role": user.role.name if user.role else "",
            }
        )
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
