"""
Alumni Network API - Test Configuration and Fixtures
"""
import os
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Callable, Dict, List

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment before the app reads its settings
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['LOG_FILE'] = ''
os.environ['LOG_LEVEL'] = 'WARNING'

from alumni_api.main import app  # noqa: E402
from alumni_api.core.database import Base, get_db  # noqa: E402
from alumni_api.core.security import get_password_hash, create_access_token  # noqa: E402
from alumni_api.models.user import User, UserRole  # noqa: E402
from alumni_api.services.notification_service import get_notification_service  # noqa: E402

fake = Faker()

DEFAULT_PASSWORD = 'testpassword123'

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


class FakeNotificationService:
    """Records bulk sends instead of talking to SMTP / the SMS gateway"""

    def __init__(self):
        self.emails: List[Dict] = []
        self.sms: List[Dict] = []

    async def send_bulk_email(self, recipients, subject, message):
        self.emails.append({"recipients": recipients, "subject": subject, "message": message})
        return {"successful": len(recipients), "failed": 0}

    async def send_bulk_sms(self, phone_numbers, message):
        self.sms.append({"phone_numbers": phone_numbers, "message": message})
        return {"successful": len(phone_numbers), "failed": 0}


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def notifier() -> FakeNotificationService:
    return FakeNotificationService()


@pytest.fixture
async def client(db_session: AsyncSession, notifier: FakeNotificationService) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database and notification overrides"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_service] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def create_user(db_session: AsyncSession) -> Callable:
    """Factory for persisted users; keyword arguments override the faker defaults"""
    async def _create_user(**overrides) -> User:
        password = overrides.pop('password', DEFAULT_PASSWORD)
        data = {
            'first_name': fake.first_name(),
            'last_name': fake.last_name(),
            'email': fake.unique.email().lower(),
            'hashed_password': get_password_hash(password),
            'role': UserRole.ALUMNI,
            'is_active': True,
            'graduation_year': fake.random_int(min=1990, max=2023),
            'profession': fake.job()[:100],
            'company': fake.company()[:100],
            'location_city': fake.city(),
            'location_country': fake.country()[:100],
        }
        data.update(overrides)
        user = User(**data)
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _create_user


def headers_for(user: User) -> dict:
    """Authorization header carrying an access token for ``user``"""
    token = create_access_token({'sub': str(user.id), 'email': user.email})
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def make_headers() -> Callable[[User], dict]:
    return headers_for


@pytest.fixture
async def test_user(create_user) -> User:
    """Regular alumni member"""
    return await create_user(phone='+252611000001')


@pytest.fixture
async def other_user(create_user) -> User:
    """A second alumni member, used for ownership checks"""
    return await create_user(phone='+252611000002')


@pytest.fixture
async def moderator_user(create_user) -> User:
    return await create_user(role=UserRole.MODERATOR)


@pytest.fixture
async def admin_user(create_user) -> User:
    return await create_user(role=UserRole.ADMIN)


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    return headers_for(test_user)


@pytest.fixture
def other_auth_headers(other_user: User) -> dict:
    return headers_for(other_user)


@pytest.fixture
def moderator_auth_headers(moderator_user: User) -> dict:
    return headers_for(moderator_user)


@pytest.fixture
def admin_auth_headers(admin_user: User) -> dict:
    return headers_for(admin_user)


# ==========================================
# Request payload builders
# ==========================================

def iso(delta: timedelta) -> str:
    return (datetime.now(timezone.utc) + delta).isoformat()


@pytest.fixture
def event_payload() -> Callable[..., dict]:
    def _event_payload(**overrides) -> dict:
        payload = {
            'title': fake.sentence(nb_words=4),
            'description': fake.paragraph(),
            'type': 'networking',
            'date': {'start': iso(timedelta(days=10)), 'end': iso(timedelta(days=10, hours=3))},
            'location': {'type': 'physical', 'venue': 'Main Hall', 'city': 'Mogadishu', 'country': 'Somalia'},
        }
        payload.update(overrides)
        return payload

    return _event_payload


@pytest.fixture
def announcement_payload() -> Callable[..., dict]:
    def _announcement_payload(**overrides) -> dict:
        payload = {
            'title': fake.sentence(nb_words=5),
            'content': fake.paragraph(),
            'category': 'news',
        }
        payload.update(overrides)
        return payload

    return _announcement_payload


@pytest.fixture
def job_payload() -> Callable[..., dict]:
    def _job_payload(**overrides) -> dict:
        payload = {
            'title': 'Backend Engineer',
            'description': fake.paragraph(),
            'company': {
                'name': fake.company(),
                'location': {'city': 'Nairobi', 'country': 'Kenya', 'is_remote': False},
            },
            'type': 'full-time',
            'category': 'technology',
            'experience_level': 'mid',
            'application_method': 'email',
            'application_contact': 'jobs@example.com',
        }
        payload.update(overrides)
        return payload

    return _job_payload
