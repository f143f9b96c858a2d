"""
Tests for UserService and AuthService.
"""

import pytest
import uuid

import httpx

from storefront.config import settings
from storefront.errors import ConfigurationError, ProfileNotFound, Unauthorized
from storefront.services.auth_service import AuthService
from storefront.services.user_service import UserService, parse_uuid


def test_parse_uuid():
    value = uuid.uuid4()
    assert parse_uuid(value) is value
    assert parse_uuid(str(value)) == value
    assert parse_uuid("not-a-uuid") is None
    assert parse_uuid("") is None


@pytest.mark.asyncio
async def test_get_profile(db, profile):
    found = await UserService(db).get_profile(str(profile.user_id))

    assert found.id == profile.id
    assert found.payer_reference == "01700000000"


@pytest.mark.asyncio
@pytest.mark.parametrize("user_id", ["garbage", str(uuid.uuid4())])
async def test_get_profile_missing(db, profile, user_id):
    with pytest.raises(ProfileNotFound):
        await UserService(db).get_profile(user_id)


class TestAuthService:

    @pytest.fixture
    def auth_backend(self, monkeypatch):
        monkeypatch.setattr(settings, "supabase_url", "https://auth.example.co/")
        monkeypatch.setattr(settings, "supabase_service_role_key", "service-key")

    @pytest.mark.parametrize("header", [None, "", "Bearer "])
    def test_extract_token_missing(self, header):
        with pytest.raises(Unauthorized):
            AuthService.extract_token(header)

    def test_extract_token(self):
        assert AuthService.extract_token("Bearer abc.def") == "abc.def"

    @pytest.mark.asyncio
    async def test_valid_token(self, auth_backend):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "user-1", "email": "a@b.c"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            user_id = await AuthService(http).get_user_id("abc")

        assert user_id == "user-1"
        assert str(seen[0].url) == "https://auth.example.co/auth/v1/user"
        assert seen[0].headers["apikey"] == "service-key"
        assert seen[0].headers["authorization"] == "Bearer abc"

    @pytest.mark.asyncio
    async def test_rejected_token(self, auth_backend):
        transport = httpx.MockTransport(lambda request: httpx.Response(401, json={"msg": "bad jwt"}))

        async with httpx.AsyncClient(transport=transport) as http:
            with pytest.raises(Unauthorized):
                await AuthService(http).get_user_id("expired")

    @pytest.mark.asyncio
    async def test_unconfigured_backend(self, monkeypatch):
        monkeypatch.setattr(settings, "supabase_url", "")

        async with httpx.AsyncClient() as http:
            with pytest.raises(ConfigurationError):
                await AuthService(http).get_user_id("abc")
