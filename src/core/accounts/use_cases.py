"""
Use Cases (Application Services) of the Accounts domain.

Use cases:
- RegisterUserService: Create an account (self-service or by super-admin)
- LoginService: Exchange credentials for a bearer token
- CurrentUserService: Resolve a bearer token to its user
- ChangePasswordService: Change the actor's own password
- ListUsersService: Paginated user directory (staff)
- UpdateUserService: Edit name/role/department/active flag (super-admin)
- DeleteUserService: Remove an account (super-admin)
- UserStatsService: Counts by role and department (staff)

Principles:
- One use case = one business operation
- Dependencies injected (repositories, hasher, token service, UoW)
- The acting user is always passed explicitly
"""

import logging
from typing import Optional

from src.core.shared.exceptions import (
    AuthenticationError,
    BusinessRuleViolationError,
    EntityNotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from src.core.shared.interfaces import UnitOfWork
from src.core.shared.pagination import Page, PageRequest

from .dtos import (
    AuthTokenOutputDTO,
    ChangePasswordInputDTO,
    ListUsersQueryDTO,
    LoginInputDTO,
    RegisterUserInputDTO,
    UpdateUserInputDTO,
    UserOutputDTO,
)
from .entities import ActorRole, UserEntity
from .events import UserRegisteredEvent
from .ports import PasswordHasher, TokenService, UserRepository

logger = logging.getLogger(__name__)


def _parse_role(value: str, field: str = "role") -> ActorRole:
    try:
        return ActorRole.from_string(value)
    except ValueError:
        raise ValidationError(f"Invalid role: {value}", field=field)


def require_staff(actor: UserEntity, action: str) -> None:
    if not actor.is_staff:
        raise PermissionDeniedError("Staff role required", action=action)


def require_super_admin(actor: UserEntity, action: str) -> None:
    if actor.role != ActorRole.SUPER_ADMIN:
        raise PermissionDeniedError("Super-admin role required", action=action)


def get_user_or_raise(user_repo: UserRepository, user_id: str) -> UserEntity:
    user = user_repo.get_by_id(user_id)
    if not user:
        raise EntityNotFoundError(
            f"User {user_id} not found",
            entity_type="User",
            entity_id=user_id,
        )
    return user


class RegisterUserService:
    """
    Use Case: Register a user.

    Flow:
    1. Parse role and check who may grant it
    2. Validate password and email uniqueness
    3. Create and persist the entity
    4. Fire UserRegisteredEvent

    Self-registration (actor=None) can only create employees;
    any other role, and any registration by a logged-in user,
    requires a super-admin.
    """

    def __init__(self, user_repo: UserRepository, hasher: PasswordHasher, uow: UnitOfWork):
        self.user_repo = user_repo
        self.hasher = hasher
        self.uow = uow

    def execute(
        self,
        input_dto: RegisterUserInputDTO,
        actor: Optional[UserEntity] = None,
    ) -> UserOutputDTO:
        """
        Args:
            input_dto: Registration data
            actor: Logged-in user creating the account (None = self-service)

        Returns:
            DTO of the created user

        Raises:
            ValidationError: Invalid role, email, name or password
            PermissionDeniedError: Role cannot be granted by this actor
            BusinessRuleViolationError: Email already registered
        """
        role = _parse_role(input_dto.role or ActorRole.EMPLOYEE.value)

        if actor is not None:
            require_super_admin(actor, "create_user")
        elif role != ActorRole.EMPLOYEE:
            raise PermissionDeniedError(
                "Only a super-admin can create staff accounts",
                action="create_user",
            )

        UserEntity.validate_password(input_dto.password)
        email = UserEntity.normalize_email(input_dto.email)

        with self.uow:
            if self.user_repo.get_by_email(email):
                raise BusinessRuleViolationError(
                    f"Email {email} is already registered",
                    rule="unique_email",
                )

            user = UserEntity.create(
                name=input_dto.name,
                email=email,
                password_hash=self.hasher.hash(input_dto.password),
                role=role,
                department=input_dto.department,
            )
            self.user_repo.save(user)

            self.uow.publish_event(
                UserRegisteredEvent(
                    aggregate_id=user.id,
                    email=user.email,
                    role=user.role.value,
                    department=user.department,
                    registered_by_id=actor.id if actor else None,
                )
            )

        logger.info(f"User registered: {user.id} ({user.role.value})")
        return UserOutputDTO.from_entity(user)


class LoginService:
    """
    Use Case: Log in.

    Wrong email, wrong password and inactive accounts all fail with
    the same AuthenticationError so callers cannot probe accounts.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        hasher: PasswordHasher,
        tokens: TokenService,
        uow: UnitOfWork,
    ):
        self.user_repo = user_repo
        self.hasher = hasher
        self.tokens = tokens
        self.uow = uow

    def execute(self, input_dto: LoginInputDTO) -> AuthTokenOutputDTO:
        try:
            email = UserEntity.normalize_email(input_dto.email)
        except ValidationError:
            raise AuthenticationError("Invalid email or password")

        with self.uow:
            user = self.user_repo.get_by_email(email)

            if (
                not user
                or not user.is_active
                or not self.hasher.verify(input_dto.password or "", user.password_hash)
            ):
                logger.info(f"Failed login for {email}")
                raise AuthenticationError("Invalid email or password")

            user.record_login()
            self.user_repo.save(user)

        token = self.tokens.issue(user)
        logger.info(f"User logged in: {user.id}")
        return AuthTokenOutputDTO(token=token, user=UserOutputDTO.from_entity(user))


class CurrentUserService:
    """
    Use Case: Resolve a bearer token to the acting user.

    Used by every authenticated endpoint.
    """

    def __init__(self, user_repo: UserRepository, tokens: TokenService):
        self.user_repo = user_repo
        self.tokens = tokens

    def execute(self, token: Optional[str]) -> UserEntity:
        """
        Raises:
            AuthenticationError: Missing/invalid/expired token or
                unknown/inactive user
        """
        if not token:
            raise AuthenticationError("Authentication token missing")

        claims = self.tokens.decode(token)
        if claims is None:
            raise AuthenticationError("Invalid or expired token")

        user = self.user_repo.get_by_id(claims.user_id)
        if not user or not user.is_active:
            raise AuthenticationError("User not found or inactive")

        return user


class ChangePasswordService:
    """Use Case: Change the actor's own password."""

    def __init__(self, user_repo: UserRepository, hasher: PasswordHasher, uow: UnitOfWork):
        self.user_repo = user_repo
        self.hasher = hasher
        self.uow = uow

    def execute(self, actor: UserEntity, input_dto: ChangePasswordInputDTO) -> None:
        if not self.hasher.verify(input_dto.current_password or "", actor.password_hash):
            raise ValidationError(
                "Current password is incorrect",
                field="current_password",
            )
        UserEntity.validate_password(input_dto.new_password)

        with self.uow:
            actor.set_password_hash(self.hasher.hash(input_dto.new_password))
            self.user_repo.save(actor)

        logger.info(f"Password changed for user {actor.id}")


class ListUsersService:
    """Use Case: Paginated user directory (staff only)."""

    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    def execute(self, actor: UserEntity, query: ListUsersQueryDTO) -> Page[UserOutputDTO]:
        require_staff(actor, "list_users")

        role = _parse_role(query.role) if query.role else None
        page_request = PageRequest.from_params(query.page, query.limit)

        page = self.user_repo.list_page(
            page_request,
            role=role,
            department=query.department or None,
        )
        return page.map(UserOutputDTO.from_entity)


class UpdateUserService:
    """
    Use Case: Edit a user (super-admin only).

    A super-admin cannot demote or deactivate their own account.
    """

    def __init__(self, user_repo: UserRepository, uow: UnitOfWork):
        self.user_repo = user_repo
        self.uow = uow

    def execute(self, actor: UserEntity, input_dto: UpdateUserInputDTO) -> UserOutputDTO:
        require_super_admin(actor, "update_user")
        role = _parse_role(input_dto.role) if input_dto.role else None

        with self.uow:
            user = get_user_or_raise(self.user_repo, input_dto.user_id)

            if user.id == actor.id:
                if role is not None and role != ActorRole.SUPER_ADMIN:
                    raise BusinessRuleViolationError(
                        "You cannot change your own role",
                        rule="cannot_demote_self",
                    )
                if input_dto.is_active is False:
                    raise BusinessRuleViolationError(
                        "You cannot deactivate your own account",
                        rule="cannot_deactivate_self",
                    )

            if input_dto.name is not None:
                user.rename(input_dto.name)
            if role is not None:
                user.change_role(role)
            if input_dto.department is not None:
                user.move_to_department(input_dto.department)
            if input_dto.is_active is not None:
                user.set_active(input_dto.is_active)

            self.user_repo.save(user)

        logger.info(f"User {user.id} updated by {actor.id}")
        return UserOutputDTO.from_entity(user)


class DeleteUserService:
    """Use Case: Delete a user (super-admin only, never oneself)."""

    def __init__(self, user_repo: UserRepository, uow: UnitOfWork):
        self.user_repo = user_repo
        self.uow = uow

    def execute(self, actor: UserEntity, user_id: str) -> None:
        require_super_admin(actor, "delete_user")

        if user_id == actor.id:
            raise BusinessRuleViolationError(
                "You cannot delete your own account",
                rule="cannot_delete_self",
            )

        with self.uow:
            get_user_or_raise(self.user_repo, user_id)
            self.user_repo.delete(user_id)

        logger.info(f"User {user_id} deleted by {actor.id}")


class UserStatsService:
    """Use Case: User counts by role and by department (staff only)."""

    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    def execute(self, actor: UserEntity) -> dict:
        require_staff(actor, "user_stats")

        by_role = self.user_repo.count_by_role()
        return {
            "total": sum(by_role.values()),
            "by_role": by_role,
            "by_department": self.user_repo.count_by_department(),
        }
