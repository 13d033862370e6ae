import json

import httpx
import pytest

from gatepass.core.security import decode_token, issue_token_pair, refresh_access_token
from gatepass.services.auth import (
    MOCK_CREDENTIALS_HINT,
    MOCK_UNAVAILABLE,
    MockAuthProvider,
    RemoteAuthProvider,
    build_auth_provider,
    remember_identity,
    validate_sign_up,
)
from gatepass.services.hosted_auth import (
    HostedAuthClient,
    HostedAuthError,
    HostedAuthNotConfigured,
    extract_user,
)


def _remote(handler):
    client = HostedAuthClient(
        base_url="https://auth.example.test/",
        api_key="anon-key",
        transport=httpx.MockTransport(handler),
    )
    return RemoteAuthProvider(client=client)


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"full_name": ""}, "Full name"),
        ({"phone": " "}, "Phone"),
        ({"email": "not-an-email"}, "e-mail"),
        ({"password": "abc12"}, "at least 8"),
        ({"password": "abcdefgh"}, "letters and numbers"),
        ({"password": "12345678"}, "letters and numbers"),
    ],
)
def test_validate_sign_up_rejects(kwargs, message):
    values = {"email": "maria@example.com", "password": "secret123", "full_name": "Maria", "phone": "11 9999"}
    values.update(kwargs)
    with pytest.raises(ValueError, match=message):
        validate_sign_up(**values)


def test_validate_sign_up_accepts_good_input():
    validate_sign_up("maria@example.com", "secret123", "Maria", "11 9999")


def test_mock_provider_signs_in_demo_accounts():
    provider = MockAuthProvider()

    admin = provider.sign_in(" Alice@GatePass.com ", "123456")
    client = provider.sign_in("joao@cliente.com", "123456")

    assert admin.success and admin.identity.is_admin
    assert client.success and not client.identity.is_admin
    assert client.identity.approved is True
    assert client.identity.full_name == "João Silva"


def test_mock_provider_rejects_bad_credentials():
    provider = MockAuthProvider()

    wrong_password = provider.sign_in("joao@cliente.com", "654321")
    unknown = provider.sign_in("ghost@example.com", "123456")

    assert wrong_password.error == MOCK_CREDENTIALS_HINT
    assert unknown.error == MOCK_CREDENTIALS_HINT
    assert provider.sign_up("a@b.co", "secret123", "A", "1").error == MOCK_UNAVAILABLE
    assert provider.reset_password("a@b.co").error == MOCK_UNAVAILABLE


def test_build_auth_provider():
    assert build_auth_provider("mock").name == "mock"
    with pytest.raises(ValueError):
        build_auth_provider("ldap")


def test_remote_client_requires_configuration():
    with pytest.raises(HostedAuthNotConfigured):
        HostedAuthClient(base_url="", api_key="")


def test_remote_sign_up_sends_metadata_and_needs_approval():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["apikey"] = request.headers["apikey"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "id": "remote-1",
                "email": "maria@example.com",
                "user_metadata": {"full_name": "Maria", "phone": "11 9999", "approved": False},
            },
        )

    result = _remote(handler).sign_up("Maria@Example.com", "secret123", " Maria ", "11 9999")

    assert seen["path"] == "/auth/v1/signup"
    assert seen["apikey"] == "anon-key"
    assert seen["body"]["email"] == "maria@example.com"
    assert seen["body"]["data"] == {"full_name": "Maria", "phone": "11 9999", "approved": False}
    assert result.success and result.needs_approval
    assert result.identity.id == "remote-1"
    assert result.identity.approved is False


def test_remote_sign_up_validates_before_calling_backend():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("backend should not be called")

    result = _remote(handler).sign_up("maria@example.com", "short", "Maria", "11")

    assert not result.success
    assert "at least 8" in result.error


def test_remote_sign_in_success():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/auth/v1/token"
        assert request.url.params["grant_type"] == "password"
        return httpx.Response(
            200,
            json={
                "access_token": "backend-token",
                "user": {
                    "id": "remote-2",
                    "email": "alice@gatepass.com",
                    "user_metadata": {"full_name": "Alice"},
                },
            },
        )

    result = _remote(handler).sign_in("alice@gatepass.com", "secret123")

    assert result.success
    assert result.access_token == "backend-token"
    assert result.identity.is_admin
    # The configured admin is approved even without the metadata flag.
    assert result.identity.approved is True


def test_remote_sign_in_reads_legacy_metadata_keys():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "access_token": "backend-token",
                "user": {
                    "id": "remote-3",
                    "email": "joao@cliente.com",
                    "user_metadata": {
                        "nome_completo": "João Silva",
                        "celular": "(11) 91234-5678",
                        "aprovado": True,
                    },
                },
            },
        )

    identity = _remote(handler).sign_in("joao@cliente.com", "secret123").identity

    assert identity.full_name == "João Silva"
    assert identity.phone == "(11) 91234-5678"
    assert identity.approved is True
    assert not identity.is_admin


def test_remote_sign_in_surfaces_backend_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "invalid_grant", "error_description": "Invalid login credentials"})

    result = _remote(handler).sign_in("maria@example.com", "wrong")

    assert not result.success
    assert result.error == "Invalid login credentials"


def test_remote_backend_unreachable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    provider = _remote(handler)

    assert provider.sign_in("maria@example.com", "secret123").error == "Authentication service is unavailable"
    # Sign out never raises; the local session goes away regardless.
    provider.sign_out("backend-token")


def test_remote_reset_passes_redirect():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["redirect_to"] = request.url.params.get("redirect_to")
        return httpx.Response(200, json={})

    result = _remote(handler).reset_password("maria@example.com")

    assert result.success
    assert seen["path"] == "/auth/v1/recover"
    assert seen["redirect_to"].endswith("/auth?reset=1")


def test_hosted_client_raises_with_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="down")

    client = HostedAuthClient(base_url="https://auth.example.test", api_key="k", transport=httpx.MockTransport(handler))
    with pytest.raises(HostedAuthError) as excinfo:
        client.sign_out("token")
    assert excinfo.value.status_code == 503
    client.close()


def test_extract_user_from_either_shape():
    assert extract_user({"user": {"id": "1", "email": "a@b.co"}}) == {"id": "1", "email": "a@b.co"}
    assert extract_user({"id": "2", "email": "c@d.co"})["id"] == "2"
    assert extract_user({"access_token": "x"}) is None


def test_remember_identity_mirrors_user(db_session):
    identity = MockAuthProvider().sign_in("joao@cliente.com", "123456").identity

    user = remember_identity(db_session, identity)

    assert user.id == "client-user-id"
    assert user.is_approved
    assert user.phone == "+55 11 88888-8888"


def test_token_pair_round_trip():
    pair = issue_token_pair("client-user-id")

    assert decode_token(pair.access_token, verify_type="access").sub == "client-user-id"
    with pytest.raises(ValueError, match="token type"):
        decode_token(pair.refresh_token, verify_type="access")
    with pytest.raises(ValueError):
        decode_token("garbage")

    refreshed = refresh_access_token(pair.refresh_token)
    assert decode_token(refreshed.access_token).typ == "access"
