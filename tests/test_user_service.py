"""
Cat API — User Service Unit Tests
===================================

What we test:
    ✅ Sign-up hashes the password and fixes the role to "user"
    ✅ Projections never carry the password hash or role
    ✅ Self-update re-hashes a new password
    ✅ Delete-current keeps the row unless hard delete is enabled
    ✅ Token check and login failure modes
"""

from unittest.mock import MagicMock, patch

import pytest

from catapi.auth import Identity, decode_access_token, hash_password, verify_password
from catapi.exceptions import ForbiddenError, NotFoundError
from catapi.models.user import User
from catapi.schemas.user import UserCreate, UserUpdate
from catapi.services.user_service import UserService

ALICE = Identity(id="alice-id", email="alice@metropolia.fi", role="user", user_name="alice")


def make_user(password="secret", **overrides) -> User:
    fields = {
        "id": ALICE.id,
        "user_name": "alice",
        "email": "alice@metropolia.fi",
        "role": "user",
        "password": hash_password(password),
    }
    fields.update(overrides)
    return User(**fields)


def returns_one(session, value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    session.execute.return_value = result


class TestUserServiceCreate:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_create_hashes_password(self, mock_db_session):
        added = []

        def capture(user):
            user.id = "new-user"
            added.append(user)

        mock_db_session.add.side_effect = capture

        result = await self.service.create_user(
            mock_db_session,
            UserCreate(user_name="alice", email="alice@metropolia.fi", password="secret"),
        )

        stored = added[0]
        assert stored.password != "secret"
        assert verify_password("secret", stored.password)
        assert stored.role == "user"
        assert result.message == "User created"
        assert result.data.model_dump(by_alias=True) == {
            "_id": "new-user",
            "user_name": "alice",
            "email": "alice@metropolia.fi",
        }


class TestUserServiceReads:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_list_users_empty(self, mock_db_session):
        result = MagicMock()
        result.scalars.return_value.all.return_value = []
        mock_db_session.execute.return_value = result
        with pytest.raises(NotFoundError, match="No users found"):
            await self.service.list_users(mock_db_session)

    @pytest.mark.asyncio
    async def test_get_user_omits_password_and_role(self, mock_db_session):
        returns_one(mock_db_session, make_user())

        user = await self.service.get_user(mock_db_session, ALICE.id)

        payload = user.model_dump(by_alias=True)
        assert "password" not in payload
        assert "role" not in payload

    @pytest.mark.asyncio
    async def test_get_user_not_found(self, mock_db_session):
        returns_one(mock_db_session, None)
        with pytest.raises(NotFoundError, match="User not found"):
            await self.service.get_user(mock_db_session, "missing")


class TestUserServiceCurrent:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_update_rehashes_new_password(self, mock_db_session):
        user = make_user()
        returns_one(mock_db_session, user)

        result = await self.service.update_current_user(
            mock_db_session, ALICE, UserUpdate(password="better-secret")
        )

        assert result.message == "User updated"
        assert verify_password("better-secret", user.password)
        assert not verify_password("secret", user.password)

    @pytest.mark.asyncio
    async def test_update_keeps_unsent_fields(self, mock_db_session):
        user = make_user()
        returns_one(mock_db_session, user)

        await self.service.update_current_user(mock_db_session, ALICE, UserUpdate(user_name="alicia"))

        assert user.user_name == "alicia"
        assert user.email == "alice@metropolia.fi"
        assert verify_password("secret", user.password)

    @pytest.mark.asyncio
    async def test_delete_keeps_row_by_default(self, mock_db_session):
        returns_one(mock_db_session, make_user())

        result = await self.service.delete_current_user(mock_db_session, ALICE)

        assert result.message == "User deleted"
        mock_db_session.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_removes_row_when_hard_delete_enabled(self, mock_db_session):
        user = make_user()
        returns_one(mock_db_session, user)

        with patch("catapi.services.user_service.settings") as mock_settings:
            mock_settings.hard_delete_users = True
            result = await self.service.delete_current_user(mock_db_session, ALICE)

        assert result.message == "User deleted"
        mock_db_session.delete.assert_awaited_once_with(user)

    @pytest.mark.asyncio
    async def test_update_for_vanished_user_is_not_found(self, mock_db_session):
        returns_one(mock_db_session, None)

        with pytest.raises(NotFoundError, match="User not found"):
            await self.service.update_current_user(
                mock_db_session, ALICE, UserUpdate(user_name="alicia")
            )
        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_for_vanished_user_is_not_found(self, mock_db_session):
        returns_one(mock_db_session, None)

        with pytest.raises(NotFoundError, match="User not found"):
            await self.service.delete_current_user(mock_db_session, ALICE)
        mock_db_session.delete.assert_not_awaited()


class TestTokenAndLogin:

    def setup_method(self):
        self.service = UserService()

    def test_check_token_without_identity(self):
        with pytest.raises(ForbiddenError, match="token not valid"):
            self.service.check_token(None)

    def test_check_token_echoes_identity(self):
        payload = self.service.check_token(ALICE).model_dump(by_alias=True)
        assert payload == {
            "_id": ALICE.id,
            "user_name": "alice",
            "email": "alice@metropolia.fi",
            "role": "user",
        }

    @pytest.mark.asyncio
    async def test_login_success_issues_token(self, mock_db_session):
        returns_one(mock_db_session, make_user())

        result = await self.service.login(mock_db_session, "alice@metropolia.fi", "secret")

        assert result.message == "Login successful"
        assert decode_access_token(result.token).id == ALICE.id
        assert result.user.email == "alice@metropolia.fi"

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, mock_db_session):
        returns_one(mock_db_session, make_user())
        with pytest.raises(ForbiddenError, match="Incorrect username/password"):
            await self.service.login(mock_db_session, "alice@metropolia.fi", "wrong")

    @pytest.mark.asyncio
    async def test_login_unknown_email(self, mock_db_session):
        returns_one(mock_db_session, None)
        with pytest.raises(ForbiddenError, match="Incorrect username/password"):
            await self.service.login(mock_db_session, "nobody@metropolia.fi", "secret")
