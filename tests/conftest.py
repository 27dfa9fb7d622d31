"""
Global pytest configuration for the Helpdesk.

Loaded automatically by pytest. It:
- Configures Django with an in-memory SQLite database
- Provides shared fixtures (users, repositories, unit of work)
- Adds the --run-integration switch
"""

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="run integration tests",
    )


def pytest_configure(config):
    """Configure Django before any test module is imported."""
    import django
    from django.conf import settings

    if not settings.configured:
        settings.configure(
            DEBUG=True,
            SECRET_KEY='test-secret-key',
            DATABASES={
                'default': {
                    'ENGINE': 'django.db.backends.sqlite3',
                    'NAME': ':memory:',
                }
            },
            INSTALLED_APPS=[
                'django.contrib.admin',
                'django.contrib.auth',
                'django.contrib.contenttypes',
                'django.contrib.sessions',
                'django.contrib.messages',
                'src.adapters.django_app.accounts',
                'src.adapters.django_app.tickets',
            ],
            MIDDLEWARE=[],
            ROOT_URLCONF='src.config.urls',
            DEFAULT_AUTO_FIELD='django.db.models.BigAutoField',
            USE_TZ=True,
            TIME_ZONE='UTC',
            PASSWORD_HASHERS=['django.contrib.auth.hashers.MD5PasswordHasher'],
            JWT_SECRET_KEY='test-jwt-secret-key-with-enough-length',
            JWT_ALGORITHM='HS256',
            JWT_EXPIRE_HOURS=1,
            OPENAI_API_KEY='',
            OPENAI_BASE_URL=None,
            OPENAI_MODEL='gpt-4o-mini',
            OPENAI_TIMEOUT=5.0,
            TICKETS_PAGE_SIZE=10,
            EVENT_PUBLISHER_MODE='sync',
        )
        django.setup()

    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is given."""
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="use --run-integration to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


# =============================================================================
# Container
# =============================================================================

@pytest.fixture(autouse=True)
def reset_di_container():
    """Every test starts with a fresh container."""
    from src.config.container import reset_container

    reset_container()
    yield
    reset_container()


# =============================================================================
# Users
# =============================================================================

def make_user(name="Ana Employee", email=None, role=None, department="Finance"):
    from src.core.accounts.entities import ActorRole, UserEntity

    return UserEntity.create(
        name=name,
        email=email or f"{name.split()[0].lower()}@example.com",
        password_hash="unused",
        role=role or ActorRole.EMPLOYEE,
        department=department,
    )


@pytest.fixture
def employee():
    return make_user("Ana Employee", department="Finance")


@pytest.fixture
def other_employee():
    return make_user("Bruno Employee", department="Sales")


@pytest.fixture
def it_agent():
    from src.core.accounts.entities import ActorRole
    return make_user("Ivan Agent", role=ActorRole.IT, department="IT")


@pytest.fixture
def hr_agent():
    from src.core.accounts.entities import ActorRole
    return make_user("Helga Agent", role=ActorRole.HR, department="HR")


@pytest.fixture
def admin():
    from src.core.accounts.entities import ActorRole
    return make_user("Alba Admin", role=ActorRole.ADMIN, department="Operations")


@pytest.fixture
def super_admin():
    from src.core.accounts.entities import ActorRole
    return make_user("Sam Root", role=ActorRole.SUPER_ADMIN, department="IT")


# =============================================================================
# In-memory collaborators
# =============================================================================

@pytest.fixture
def ticket_repo():
    from src.core.tickets.ports import InMemoryTicketRepository
    return InMemoryTicketRepository()


@pytest.fixture
def user_repo(employee, other_employee, it_agent, hr_agent, admin, super_admin):
    from src.core.accounts.ports import InMemoryUserRepository

    repo = InMemoryUserRepository()
    for user in (employee, other_employee, it_agent, hr_agent, admin, super_admin):
        repo.save(user)
    return repo


@pytest.fixture
def uow():
    from src.adapters.django_app.shared.unit_of_work import InMemoryUnitOfWork
    return InMemoryUnitOfWork()


@pytest.fixture
def keyword_classifier():
    from src.core.assistant.keywords import KeywordTicketClassifier
    return KeywordTicketClassifier()


@pytest.fixture
def make_ticket(ticket_repo):
    """Persist a ticket requested by the given user."""
    from src.core.tickets.entities import TicketCategory, TicketEntity, TicketPriority

    def _make(requester, title="Laptop will not boot", category=TicketCategory.IT, **kwargs):
        ticket = TicketEntity.create(
            title=title,
            description=kwargs.pop("description", "Black screen right after the update"),
            requester=requester.to_ref(),
            priority=kwargs.pop("priority", TicketPriority.MEDIUM),
            category=category,
            **kwargs,
        )
        ticket_repo.save(ticket)
        return ticket

    return _make
