"""
Classdesk - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator, Callable, Dict
import pytest
from httpx import AsyncClient, ASGITransport
from faker import Faker

# Set testing environment
os.environ['TESTING'] = 'true'
os.environ['MONGODB_URL'] = 'mongodb://localhost:27017'
os.environ['MONGODB_DB_NAME'] = 'classdesk_test'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['ADMIN_REGISTRATION_CODE'] = 'test-admin-code'
os.environ['DEPLOYMENT_PROFILE'] = 'grading'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['LOG_LEVEL'] = 'WARNING'

from app.main import create_app
from app.core.database import ConnectionState, DatabaseManager
from app.core.security import create_access_token, get_password_hash
from app.models.user import USERS_COLLECTION, UserRole, new_user_document
from mocks.mock_mongo import MockMotorClient

fake = Faker()

ADMIN_CODE = 'test-admin-code'
STRONG_PASSWORD = 'Abcdef1!'


@pytest.fixture
async def db_manager() -> AsyncGenerator[DatabaseManager, None]:
    """Connected manager backed by an in-memory MongoDB"""
    manager = DatabaseManager(
        'mongodb://localhost:27017',
        'classdesk_test',
        max_retries=0,
        client_factory=MockMotorClient,
    )
    await manager.connect()
    await manager.ensure_indexes()
    assert manager.state == ConnectionState.CONNECTED
    yield manager
    await manager.disconnect()


@pytest.fixture
def db(db_manager: DatabaseManager):
    """Database handle for direct inserts and assertions"""
    return db_manager.database


def _client_for(profile: str, manager: DatabaseManager) -> AsyncClient:
    app = create_app(profile)
    app.state.db_manager = manager
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url='http://test')


@pytest.fixture
async def client(db_manager: DatabaseManager) -> AsyncGenerator[AsyncClient, None]:
    """Test client for the grading profile"""
    async with _client_for('grading', db_manager) as ac:
        yield ac


@pytest.fixture
async def tasks_client(db_manager: DatabaseManager) -> AsyncGenerator[AsyncClient, None]:
    """Test client for the tasks profile"""
    async with _client_for('tasks', db_manager) as ac:
        yield ac


@pytest.fixture
def make_user(db) -> Callable:
    """Factory inserting a user directly; returns the stored document"""

    async def _make_user(
        role: UserRole = UserRole.STUDENT,
        password: str = STRONG_PASSWORD,
        email: str = None,
        first_name: str = None,
        last_name: str = None,
        is_active: bool = True,
    ) -> Dict:
        doc = new_user_document(
            email=email or fake.unique.email(),
            username=fake.unique.user_name(),
            password_hash=get_password_hash(password),
            role=role,
            first_name=first_name if first_name is not None else fake.first_name(),
            last_name=last_name if last_name is not None else fake.last_name(),
        )
        doc['is_active'] = is_active
        await db[USERS_COLLECTION].insert_one(doc)
        return doc

    return _make_user


@pytest.fixture
def auth_headers() -> Callable:
    """Factory building a Bearer header for a stored user document"""

    def _auth_headers(user: Dict) -> Dict[str, str]:
        token = create_access_token({
            'sub': str(user['_id']),
            'email': user['email'],
            'role': user['role'],
        })
        return {'Authorization': f'Bearer {token}'}

    return _auth_headers
