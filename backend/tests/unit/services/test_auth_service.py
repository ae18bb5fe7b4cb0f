import pytest
from unittest.mock import MagicMock
from scrs.services.auth_service import AuthService, split_full_name
from scrs.models.user import User, UserRole
from scrs.schemas.auth import LoginRequest, RegisterRequest
from scrs.core.exceptions import AuthFailureError, ConflictError, ForbiddenError
from scrs.core.security import create_access_token, create_user_token, decode_access_token, get_password_hash
from tests.mocks.mock_user_repository import MockUserRepository

class TestAuthService:
    @pytest.fixture
    def service(self):
        repo = MockUserRepository()
        password_hash = get_password_hash("password123")
        # Seed users
        repo.create(None, User(
            email="student@uni.example.com",
            hashed_password=password_hash,
            username="student",
            first_name="Sam",
            role=UserRole.STUDENT,
            is_active=True,
        ))
        repo.create(None, User(
            email="blocked@uni.example.com",
            hashed_password=password_hash,
            username="blocked",
            role=UserRole.STUDENT,
            is_active=False,
        ))

        service = AuthService(db=MagicMock())  # DB session mocked
        service.user_repo = repo  # Inject mock repo
        return service

    @pytest.mark.asyncio
    async def test_login_by_username(self, service):
        response = await service.login(LoginRequest(identifier="student", password="password123"))
        assert response.token_type == "bearer"
        assert response.user.username == "student"

        claims = decode_access_token(response.access_token)
        assert claims["sub"] == "1"
        assert claims["username"] == "student"
        assert claims["role"] == "STUDENT"

    @pytest.mark.asyncio
    async def test_login_by_email_is_case_insensitive(self, service):
        response = await service.login(LoginRequest(identifier="Student@Uni.Example.com", password="password123"))
        assert response.user.id == 1

    @pytest.mark.asyncio
    async def test_login_invalid_password(self, service):
        with pytest.raises(AuthFailureError) as excinfo:
            await service.login(LoginRequest(identifier="student", password="wrong"))
        assert excinfo.value.status_code == 401

    @pytest.mark.asyncio
    async def test_login_unknown_user(self, service):
        with pytest.raises(AuthFailureError):
            await service.login(LoginRequest(identifier="nobody", password="password123"))

    @pytest.mark.asyncio
    async def test_login_inactive_user(self, service):
        with pytest.raises(ForbiddenError) as excinfo:
            await service.login(LoginRequest(identifier="blocked", password="password123"))
        assert excinfo.value.status_code == 403

    def test_legacy_login_field(self):
        req = LoginRequest.model_validate({"usernameOrEmail": "student", "password": "x"})
        assert req.identifier == "student"

    def test_register_creates_student(self, service):
        response = service.register(RegisterRequest(
            username="newbie",
            email="newbie@uni.example.com",
            password="secret1",
            full_name="New Student Person",
        ))
        user = service.user_repo.get_by_username(None, "newbie")
        assert user is not None
        assert user.role == UserRole.STUDENT
        assert user.first_name == "New"
        assert user.last_name == "Student Person"
        assert user.hashed_password != "secret1"
        assert response.user.username == "newbie"
        service.db.commit.assert_called_once()

    def test_register_duplicate_username(self, service):
        with pytest.raises(ConflictError):
            service.register(RegisterRequest(username="student", email="other@uni.example.com", password="secret1"))

    def test_register_duplicate_email(self, service):
        with pytest.raises(ConflictError):
            service.register(RegisterRequest(username="other", email="student@uni.example.com", password="secret1"))

    def test_validate_token(self, service):
        token = create_user_token(1, "student", "STUDENT")
        result = service.validate_token(token)
        assert result.valid is True
        assert result.user_id == 1
        assert result.role == "STUDENT"

    def test_validate_token_for_missing_user(self, service):
        with pytest.raises(AuthFailureError):
            service.validate_token(create_user_token(99, "ghost", "STUDENT"))

    def test_validate_token_rejects_garbage(self, service):
        with pytest.raises(AuthFailureError):
            service.validate_token("not-a-jwt")

    def test_validate_token_rejects_non_numeric_subject(self, service):
        with pytest.raises(AuthFailureError):
            service.validate_token(create_access_token({"sub": "student"}))


def test_split_full_name():
    assert split_full_name("Ada") == ("Ada", None)
    assert split_full_name("  Ada  Lovelace ") == ("Ada", "Lovelace")
    assert split_full_name(None) == (None, None)
    assert split_full_name("   ") == (None, None)
