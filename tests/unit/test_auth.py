"""Unit tests for token verification and the actor dependency."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock
from uuid import uuid4

import jwt
import pytest
from fastapi import HTTPException

from newsroom import auth
from newsroom.models import StaffRole
from tests.factories.content_factory import UserFactory


def _request(token: str | None):
    request = MagicMock()
    request.headers = {"Authorization": f"Bearer {token}"} if token else {}
    return request


def _db_returning(user, db_session):
    result = MagicMock()
    result.scalar_one_or_none.return_value = user
    db_session.execute.return_value = result
    return db_session


class TestTokens:
    def test_decode_issued_token(self):
        user_id = str(uuid4())
        payload = auth.decode_jwt(auth.create_access_token(user_id))
        assert payload["sub"] == user_id
        assert payload["type"] == "access"

    def test_expired_token(self):
        token = jwt.encode(
            {"sub": str(uuid4()), "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
            auth.JWT_SECRET,
            algorithm=auth.JWT_ALGORITHM,
        )
        with pytest.raises(HTTPException) as exc_info:
            auth.decode_jwt(token)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token expired"

    def test_wrong_secret(self):
        token = jwt.encode({"sub": str(uuid4())}, "a-different-signing-secret-of-enough-length", algorithm="HS256")
        with pytest.raises(HTTPException) as exc_info:
            auth.decode_jwt(token)
        assert exc_info.value.detail == "Invalid token"


class TestCurrentUser:
    @pytest.mark.asyncio
    async def test_active_user_is_returned(self, db_session):
        user = UserFactory.create(role=StaffRole.editor)
        token = auth.create_access_token(str(user.id))

        found = await auth.get_current_user(_request(token), _db_returning(user, db_session))
        assert found is user

    @pytest.mark.asyncio
    async def test_missing_header(self, db_session):
        with pytest.raises(HTTPException) as exc_info:
            await auth.get_current_user(_request(None), db_session)
        assert exc_info.value.status_code == 401
        db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_suspended_user(self, db_session):
        user = UserFactory.create(status="suspended")
        token = auth.create_access_token(str(user.id))

        with pytest.raises(HTTPException) as exc_info:
            await auth.get_current_user(_request(token), _db_returning(user, db_session))
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_non_uuid_subject(self, db_session):
        token = auth.create_access_token("not-a-uuid")
        with pytest.raises(HTTPException) as exc_info:
            await auth.get_current_user(_request(token), db_session)
        assert exc_info.value.detail == "Invalid token subject"


class TestCurrentActor:
    @pytest.mark.asyncio
    async def test_staff_becomes_actor(self):
        user = UserFactory.create(role=StaffRole.sub_editor)
        actor = await auth.get_current_actor(user)
        assert actor.id == user.id
        assert actor.role == StaffRole.sub_editor

    @pytest.mark.asyncio
    async def test_radio_user_is_refused(self):
        with pytest.raises(HTTPException) as exc_info:
            await auth.get_current_actor(UserFactory.create_radio(uuid4()))
        assert exc_info.value.status_code == 403
