"""
Dependency Injection Container.

Wires ports to adapters and builds the use cases with
dependency-injector.

Patterns:
- Singleton: one instance per process (repositories, gateways)
- Factory: new instance per call (services, UoW)
- Configuration: values taken from Django settings in get_container()
"""

from typing import Optional

from dependency_injector import containers, providers

from src.adapters.ai.openai_gateway import OpenAIChatGateway
from src.adapters.django_app.accounts.repositories import DjangoUserRepository
from src.adapters.django_app.accounts.security import DjangoPasswordHasher, JwtTokenService
from src.adapters.django_app.events.publishers import get_event_publisher
from src.adapters.django_app.shared.unit_of_work import DjangoUnitOfWork
from src.adapters.django_app.tickets.repositories import DjangoEventStore, DjangoTicketRepository
from src.core.accounts import use_cases as accounts
from src.core.assistant import services as assistant
from src.core.tickets import use_cases as tickets


class Container(containers.DeclarativeContainer):
    """
    Main container.

    Layout:
    - Configuration
    - Infrastructure: event publisher/store, AI gateway, security
    - Repositories
    - Unit of Work
    - Services (use cases)

    Example:
        container = get_container()
        service = container.create_ticket_service()
        output = service.execute(actor, input_dto)
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    config = providers.Configuration()

    # =========================================================================
    # Infrastructure
    # =========================================================================

    event_publisher = providers.Singleton(
        get_event_publisher,
        mode=config.events.publisher_mode,
    )

    event_store = providers.Singleton(DjangoEventStore)

    llm = providers.Singleton(
        OpenAIChatGateway,
        api_key=config.openai.api_key,
        model=config.openai.model,
        base_url=config.openai.base_url,
        timeout=config.openai.timeout,
    )

    password_hasher = providers.Singleton(DjangoPasswordHasher)

    token_service = providers.Singleton(
        JwtTokenService,
        secret_key=config.jwt.secret_key,
        algorithm=config.jwt.algorithm,
        expire_hours=config.jwt.expire_hours,
    )

    # =========================================================================
    # Repositories
    # =========================================================================

    ticket_repository = providers.Singleton(DjangoTicketRepository)

    user_repository = providers.Singleton(DjangoUserRepository)

    # =========================================================================
    # Unit of Work
    # =========================================================================

    unit_of_work = providers.Factory(
        DjangoUnitOfWork,
        event_publisher=event_publisher,
        event_store=event_store,
    )

    # =========================================================================
    # Services - Accounts
    # =========================================================================

    register_user_service = providers.Factory(
        accounts.RegisterUserService,
        user_repo=user_repository,
        hasher=password_hasher,
        uow=unit_of_work,
    )

    login_service = providers.Factory(
        accounts.LoginService,
        user_repo=user_repository,
        hasher=password_hasher,
        tokens=token_service,
        uow=unit_of_work,
    )

    current_user_service = providers.Factory(
        accounts.CurrentUserService,
        user_repo=user_repository,
        tokens=token_service,
    )

    change_password_service = providers.Factory(
        accounts.ChangePasswordService,
        user_repo=user_repository,
        hasher=password_hasher,
        uow=unit_of_work,
    )

    list_users_service = providers.Factory(
        accounts.ListUsersService,
        user_repo=user_repository,
    )

    update_user_service = providers.Factory(
        accounts.UpdateUserService,
        user_repo=user_repository,
        uow=unit_of_work,
    )

    delete_user_service = providers.Factory(
        accounts.DeleteUserService,
        user_repo=user_repository,
        uow=unit_of_work,
    )

    user_stats_service = providers.Factory(
        accounts.UserStatsService,
        user_repo=user_repository,
    )

    # =========================================================================
    # Services - Assistant
    # =========================================================================

    classify_ticket_service = providers.Factory(
        assistant.ClassifyTicketService,
        llm=llm,
    )

    summarize_ticket_service = providers.Factory(
        assistant.SummarizeTicketService,
        ticket_repo=ticket_repository,
        llm=llm,
    )

    supported_languages_service = providers.Factory(assistant.SupportedLanguagesService)

    translate_service = providers.Factory(
        assistant.TranslateService,
        llm=llm,
    )

    suggest_responses_service = providers.Factory(
        assistant.SuggestResponsesService,
        ticket_repo=ticket_repository,
        llm=llm,
    )

    chat_service = providers.Factory(
        assistant.ChatService,
        llm=llm,
    )

    voice_ticket_draft_service = providers.Factory(
        assistant.VoiceTicketDraftService,
        llm=llm,
    )

    # =========================================================================
    # Services - Tickets
    # =========================================================================

    create_ticket_service = providers.Factory(
        tickets.CreateTicketService,
        ticket_repo=ticket_repository,
        classifier=classify_ticket_service,
        uow=unit_of_work,
    )

    get_ticket_service = providers.Factory(
        tickets.GetTicketService,
        ticket_repo=ticket_repository,
    )

    status_options_service = providers.Factory(
        tickets.StatusOptionsService,
        ticket_repo=ticket_repository,
    )

    list_tickets_service = providers.Factory(
        tickets.ListTicketsService,
        ticket_repo=ticket_repository,
        default_limit=config.tickets.page_size,
    )

    update_ticket_service = providers.Factory(
        tickets.UpdateTicketService,
        ticket_repo=ticket_repository,
        user_repo=user_repository,
        uow=unit_of_work,
    )

    add_comment_service = providers.Factory(
        tickets.AddCommentService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
    )

    ticket_stats_service = providers.Factory(
        tickets.TicketStatsService,
        ticket_repo=ticket_repository,
    )

    department_stats_service = providers.Factory(
        tickets.DepartmentStatsService,
        ticket_repo=ticket_repository,
    )


def settings_config() -> dict:
    """Container configuration read from Django settings."""
    from django.conf import settings

    return {
        "events": {
            "publisher_mode": settings.EVENT_PUBLISHER_MODE,
        },
        "jwt": {
            "secret_key": settings.JWT_SECRET_KEY,
            "algorithm": settings.JWT_ALGORITHM,
            "expire_hours": settings.JWT_EXPIRE_HOURS,
        },
        "openai": {
            "api_key": settings.OPENAI_API_KEY,
            "model": settings.OPENAI_MODEL,
            "base_url": settings.OPENAI_BASE_URL,
            "timeout": settings.OPENAI_TIMEOUT,
        },
        "tickets": {
            "page_size": settings.TICKETS_PAGE_SIZE,
        },
    }


# =============================================================================
# Global Container
# =============================================================================

_container: Optional[Container] = None


def get_container() -> Container:
    """
    Process-wide container, created on first use from Django settings.
    """
    global _container

    if _container is None:
        _container = Container()
        _container.config.from_dict(settings_config())

    return _container


def reset_container() -> None:
    """Drop the global container (tests, settings overrides)."""
    global _container
    _container = None
