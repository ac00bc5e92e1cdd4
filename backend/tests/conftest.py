"""
NACOS Complaint API - Test Configuration and Fixtures
"""
import os
from datetime import datetime, timedelta
from typing import AsyncGenerator
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from faker import Faker

# Settings are read on import, so the environment goes first
os.environ['TESTING'] = 'true'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['BCRYPT_ROUNDS'] = '4'

from complaint_api.main import app
from complaint_api.core.database import Base, get_db
from complaint_api.core.security import get_password_hash, create_account_token
from complaint_api.models import Admin, User, Complaint, AccountRole, ComplaintStatus

fake = Faker()


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


test_engine = create_async_engine(os.environ["DATABASE_URL"])
TestSessionLocal = async_sessionmaker(test_engine, expire_on_commit=False)


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Session on freshly created tables, dropped again afterwards"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app, sharing the test session"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def student_data() -> dict:
    """Registration payload for a student"""
    return {
        'firstname': fake.first_name(),
        'lastname': fake.last_name(),
        'regno': f"CSC/{fake.random_int(2018, 2024)}/{fake.random_int(100, 999)}",
        'email': fake.unique.email(),
        'username': fake.unique.user_name(),
        'password': 'studentpassword123',
    }


@pytest.fixture
def complaint_data() -> dict:
    """Complaint form payload"""
    return {
        'name': fake.name(),
        'matric': f"CSC/{fake.random_int(2018, 2024)}/{fake.random_int(100, 999)}",
        'email': fake.email(),
        'department': 'Computer Science',
        'title': fake.sentence(nb_words=5),
        'details': fake.paragraph(),
    }


@pytest.fixture
async def admin_account(db_session: AsyncSession) -> Admin:
    """Create an admin account"""
    admin = Admin(
        username=fake.unique.user_name(),
        email=fake.unique.email(),
        hashed_password=get_password_hash('adminpassword123'),
    )
    db_session.add(admin)
    await db_session.commit()
    await db_session.refresh(admin)
    return admin


@pytest.fixture
async def student_account(db_session: AsyncSession) -> User:
    """Create a student account"""
    user = User(
        firstname=fake.first_name(),
        lastname=fake.last_name(),
        regno='CSC/2021/001',
        email=fake.unique.email(),
        username=fake.unique.user_name(),
        hashed_password=get_password_hash('studentpassword123'),
        role=AccountRole.USER.value,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def admin_auth_headers(admin_account: Admin) -> dict:
    return bearer(create_account_token(admin_account.id, admin_account.username, AccountRole.ADMIN.value))


@pytest.fixture
def student_auth_headers(student_account: User) -> dict:
    return bearer(create_account_token(student_account.id, student_account.username, AccountRole.USER.value))


@pytest.fixture
async def complaints(db_session: AsyncSession) -> list:
    """Three stored complaints, one per status"""
    created = []
    statuses = (ComplaintStatus.PENDING, ComplaintStatus.IN_PROGRESS, ComplaintStatus.RESOLVED)
    for day, status in enumerate(statuses):
        complaint = Complaint(
            name=fake.name(),
            matric=f"CSC/2022/{fake.random_int(100, 999)}",
            email=fake.email(),
            department='Computer Science' if status != ComplaintStatus.RESOLVED else 'Mathematics',
            title=f"{status.value} hostel water supply",
            details=fake.paragraph(),
            status=status.value,
            created_at=datetime(2024, 3, 1) + timedelta(days=day),
        )
        db_session.add(complaint)
        created.append(complaint)
    await db_session.commit()
    return created
