"""
Unit tests for the Accounts use cases.
"""

from datetime import timedelta

import pytest

from src.core.accounts.dtos import (
    ChangePasswordInputDTO,
    ListUsersQueryDTO,
    LoginInputDTO,
    RegisterUserInputDTO,
    UpdateUserInputDTO,
)
from src.core.accounts.entities import ActorRole, UserEntity
from src.core.accounts.events import UserRegisteredEvent
from src.core.accounts.ports import TokenClaims
from src.core.accounts.use_cases import (
    ChangePasswordService,
    CurrentUserService,
    DeleteUserService,
    ListUsersService,
    LoginService,
    RegisterUserService,
    UpdateUserService,
    UserStatsService,
)
from src.core.shared.clock import utcnow
from src.core.shared.exceptions import (
    AuthenticationError,
    BusinessRuleViolationError,
    EntityNotFoundError,
    PermissionDeniedError,
    ValidationError,
)


class FakeHasher:
    def hash(self, raw_password):
        return f"hashed:{raw_password}"

    def verify(self, raw_password, password_hash):
        return password_hash == f"hashed:{raw_password}"


class FakeTokens:
    def issue(self, user):
        return f"token-{user.id}"

    def decode(self, token):
        if not token.startswith("token-"):
            return None
        now = utcnow()
        return TokenClaims(
            user_id=token[len("token-"):],
            role="",
            issued_at=now,
            expires_at=now + timedelta(hours=1),
        )


@pytest.fixture
def hasher():
    return FakeHasher()


@pytest.fixture
def tokens():
    return FakeTokens()


@pytest.fixture
def registered(user_repo, hasher, uow):
    """Employee registered through the use case (password: secret123)."""
    service = RegisterUserService(user_repo, hasher, uow)
    output = service.execute(RegisterUserInputDTO(
        name="Carla Employee",
        email="Carla@Example.com",
        password="secret123",
        department="Legal",
    ))
    uow.reset()
    return user_repo.get_by_id(output.id)


class TestRegisterUserService:

    def test_self_registration(self, user_repo, hasher, uow):
        output = RegisterUserService(user_repo, hasher, uow).execute(RegisterUserInputDTO(
            name="Dora New",
            email="  DORA@example.com ",
            password="secret123",
        ))

        assert output.email == "dora@example.com"
        assert output.role == "employee"
        assert user_repo.get_by_id(output.id).password_hash == "hashed:secret123"
        assert isinstance(uow.published_events[0], UserRegisteredEvent)

    def test_self_registration_cannot_pick_staff_role(self, user_repo, hasher, uow):
        with pytest.raises(PermissionDeniedError):
            RegisterUserService(user_repo, hasher, uow).execute(RegisterUserInputDTO(
                name="Eve Sneaky",
                email="eve@example.com",
                password="secret123",
                role="super-admin",
            ))

    def test_super_admin_creates_staff(self, user_repo, hasher, uow, super_admin):
        output = RegisterUserService(user_repo, hasher, uow).execute(
            RegisterUserInputDTO(
                name="Nina IT",
                email="nina@example.com",
                password="secret123",
                role="it",
            ),
            actor=super_admin,
        )
        assert output.role == "it"

    def test_only_super_admin_creates_accounts(self, user_repo, hasher, uow, admin):
        with pytest.raises(PermissionDeniedError):
            RegisterUserService(user_repo, hasher, uow).execute(
                RegisterUserInputDTO(name="Someone", email="someone@example.com", password="secret123"),
                actor=admin,
            )

    def test_duplicate_email(self, user_repo, hasher, uow, registered):
        with pytest.raises(BusinessRuleViolationError) as exc_info:
            RegisterUserService(user_repo, hasher, uow).execute(RegisterUserInputDTO(
                name="Carla Again",
                email="carla@example.com",
                password="secret123",
            ))
        assert exc_info.value.rule == "unique_email"

    @pytest.mark.parametrize("field,dto", [
        ("password", RegisterUserInputDTO(name="Short Pw", email="s@example.com", password="123")),
        ("email", RegisterUserInputDTO(name="Bad Mail", email="not-an-email", password="secret123")),
        ("role", RegisterUserInputDTO(name="Bad Role", email="r@example.com", password="secret123", role="king")),
    ])
    def test_invalid_input(self, user_repo, hasher, uow, field, dto):
        with pytest.raises(ValidationError) as exc_info:
            RegisterUserService(user_repo, hasher, uow).execute(dto)
        assert exc_info.value.field == field


class TestLoginAndCurrentUser:

    def test_login_issues_token(self, user_repo, hasher, tokens, uow, registered):
        output = LoginService(user_repo, hasher, tokens, uow).execute(
            LoginInputDTO(email="CARLA@example.com", password="secret123")
        )

        assert output.token == f"token-{registered.id}"
        assert output.user.email == "carla@example.com"
        assert user_repo.get_by_id(registered.id).last_login_at is not None

    @pytest.mark.parametrize("email,password", [
        ("carla@example.com", "wrong-password"),
        ("nobody@example.com", "secret123"),
        ("garbage", "secret123"),
    ])
    def test_login_failures_look_the_same(self, user_repo, hasher, tokens, uow, registered, email, password):
        with pytest.raises(AuthenticationError) as exc_info:
            LoginService(user_repo, hasher, tokens, uow).execute(LoginInputDTO(email, password))
        assert exc_info.value.message == "Invalid email or password"

    def test_inactive_user_cannot_login(self, user_repo, hasher, tokens, uow, registered):
        registered.set_active(False)
        user_repo.save(registered)

        with pytest.raises(AuthenticationError):
            LoginService(user_repo, hasher, tokens, uow).execute(
                LoginInputDTO("carla@example.com", "secret123")
            )

    def test_current_user(self, user_repo, tokens, registered):
        user = CurrentUserService(user_repo, tokens).execute(f"token-{registered.id}")
        assert user.id == registered.id

    @pytest.mark.parametrize("token", [None, "", "forged", "token-unknown-user"])
    def test_current_user_rejects(self, user_repo, tokens, token):
        with pytest.raises(AuthenticationError):
            CurrentUserService(user_repo, tokens).execute(token)


class TestChangePasswordService:

    def test_change_password(self, user_repo, hasher, uow, registered):
        ChangePasswordService(user_repo, hasher, uow).execute(
            registered,
            ChangePasswordInputDTO(current_password="secret123", new_password="better-secret"),
        )
        assert user_repo.get_by_id(registered.id).password_hash == "hashed:better-secret"

    def test_wrong_current_password(self, user_repo, hasher, uow, registered):
        with pytest.raises(ValidationError) as exc_info:
            ChangePasswordService(user_repo, hasher, uow).execute(
                registered,
                ChangePasswordInputDTO(current_password="nope", new_password="better-secret"),
            )
        assert exc_info.value.field == "current_password"


class TestUserDirectory:

    def test_list_users_for_staff(self, user_repo, it_agent):
        page = ListUsersService(user_repo).execute(it_agent, ListUsersQueryDTO(role="employee"))

        assert page.total == 2
        assert [u.name for u in page.items] == ["Ana Employee", "Bruno Employee"]

    def test_list_users_denied_for_employee(self, user_repo, employee):
        with pytest.raises(PermissionDeniedError):
            ListUsersService(user_repo).execute(employee, ListUsersQueryDTO())

    def test_user_stats(self, user_repo, admin):
        stats = UserStatsService(user_repo).execute(admin)

        assert stats["total"] == 6
        assert stats["by_role"]["employee"] == 2
        assert stats["by_department"]["IT"] == 2


class TestUserAdministration:

    def test_update_user(self, user_repo, uow, super_admin, employee):
        output = UpdateUserService(user_repo, uow).execute(
            super_admin,
            UpdateUserInputDTO(user_id=employee.id, role="hr", department="People"),
        )

        assert output.role == "hr"
        assert output.department == "People"
        assert output.name == "Ana Employee"

    def test_cannot_demote_self(self, user_repo, uow, super_admin):
        with pytest.raises(BusinessRuleViolationError) as exc_info:
            UpdateUserService(user_repo, uow).execute(
                super_admin,
                UpdateUserInputDTO(user_id=super_admin.id, role="employee"),
            )
        assert exc_info.value.rule == "cannot_demote_self"

    def test_update_requires_super_admin(self, user_repo, uow, admin, employee):
        with pytest.raises(PermissionDeniedError):
            UpdateUserService(user_repo, uow).execute(admin, UpdateUserInputDTO(user_id=employee.id, name="X"))

    def test_delete_user(self, user_repo, uow, super_admin, employee):
        DeleteUserService(user_repo, uow).execute(super_admin, employee.id)
        assert user_repo.get_by_id(employee.id) is None

    def test_cannot_delete_self(self, user_repo, uow, super_admin):
        with pytest.raises(BusinessRuleViolationError):
            DeleteUserService(user_repo, uow).execute(super_admin, super_admin.id)

    def test_delete_unknown_user(self, user_repo, uow, super_admin):
        with pytest.raises(EntityNotFoundError):
            DeleteUserService(user_repo, uow).execute(super_admin, "missing")


class TestUserEntity:

    def test_roles(self):
        assert ActorRole.from_string("SUPER_ADMIN") == ActorRole.SUPER_ADMIN
        assert ActorRole.from_string("it").is_staff
        assert not ActorRole.EMPLOYEE.is_staff

    def test_email_is_normalized(self):
        user = UserEntity.create(name="Fay", email=" Fay@Example.COM ", password_hash="x")
        assert user.email == "fay@example.com"

    def test_name_required(self):
        with pytest.raises(ValidationError):
            UserEntity.create(name=" ", email="fay@example.com", password_hash="x")
