"""Tests for user, account and device endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.api.endpoints import well_known
from authgate.services.account_service import AccountService
from authgate.services.device_service import DeviceService
from authgate.services.user_service import UserService


@pytest.mark.asyncio
async def test_list_users_requires_admin(client: AsyncClient, auth_headers: dict) -> None:
    """Regular users cannot list users."""
    response = await client.get("/api/users", headers=auth_headers)

    assert response.status_code == 403
    assert response.json()["code"] == 403


@pytest.mark.asyncio
async def test_admin_lists_users_without_passwords(
    client: AsyncClient, test_user: dict, admin_headers: dict
) -> None:
    """Admins see every user; passwords are never returned."""
    response = await client.get("/api/users", headers=admin_headers)

    assert response.status_code == 200
    listed = response.json()["data"]
    assert {user["username"] for user in listed} == {"alice", "root"}
    assert all("password" not in user for user in listed)


@pytest.mark.asyncio
async def test_admin_creates_user(client: AsyncClient, admin_headers: dict) -> None:
    """Created users can log in with their password."""
    response = await client.post(
        "/api/users",
        json={"username": "bob", "password": "hunter22", "email": "bob@example.com"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["role"] == "user"

    login = await client.post("/api/auth/login", json={"username": "bob", "password": "hunter22"})
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_duplicate_username_is_bad_request(
    client: AsyncClient, test_user: dict, admin_headers: dict
) -> None:
    """Uniqueness violations surface as a bad request."""
    response = await client.post(
        "/api/users",
        json={"username": "alice", "password": "hunter22", "email": "other@example.com"},
        headers=admin_headers,
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_user_reads_only_self(
    client: AsyncClient, test_user: dict, admin_user: dict, auth_headers: dict
) -> None:
    """Non-admins may read their own record only."""
    own = await client.get(f"/api/users/{test_user['id']}", headers=auth_headers)
    other = await client.get(f"/api/users/{admin_user['id']}", headers=auth_headers)

    assert own.status_code == 200
    assert own.json()["data"]["email"] == "alice@example.com"
    assert other.status_code == 403


@pytest.mark.asyncio
async def test_my_account_lists_devices(
    client: AsyncClient,
    db_session: AsyncSession,
    test_account: dict,
    account_headers: dict,
) -> None:
    """The caller's account comes back sanitized with its devices."""
    device = await DeviceService().create_or_update(db_session, "dev-001", phone_model="iPhone")
    await DeviceService().link_to_account(db_session, device["id"], test_account["id"])

    response = await client.get("/api/accounts/me", headers=account_headers)

    assert response.status_code == 200
    account = response.json()["data"]
    assert account["auth0_sub"] == "auth0|u1"
    assert account["nickname"] == ""
    assert [d["device_number"] for d in account["devices"]] == ["dev-001"]
    assert account["devices"][0]["country_code"] == ""
    assert account["devices"][0]["last_login"].endswith("+08:00")


@pytest.mark.asyncio
async def test_my_account_needs_account_token(client: AsyncClient, auth_headers: dict) -> None:
    """Local users have no account."""
    response = await client.get("/api/accounts/me", headers=auth_headers)

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_device_accounts(
    client: AsyncClient,
    db_session: AsyncSession,
    test_account: dict,
    account_headers: dict,
) -> None:
    """Accounts seen on a device are listed; unknown devices are a 404."""
    device = await DeviceService().create_or_update(db_session, "dev-001")
    await DeviceService().link_to_account(db_session, device["id"], test_account["id"])

    response = await client.get("/api/devices/dev-001/accounts", headers=account_headers)
    missing = await client.get("/api/devices/ghost/accounts", headers=account_headers)

    assert response.status_code == 200
    assert [a["id"] for a in response.json()["data"]] == [test_account["id"]]
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_device_accounts_ignores_device_header(
    client: AsyncClient,
    db_session: AsyncSession,
    test_account: dict,
    account_headers: dict,
) -> None:
    """The device in the path is listed even when the deviceNumber header names another."""
    device = await DeviceService().create_or_update(db_session, "dev-001")
    await DeviceService().link_to_account(db_session, device["id"], test_account["id"])

    response = await client.get(
        "/api/devices/dev-001/accounts",
        headers={**account_headers, "deviceNumber": "dev-other"},
    )

    assert response.status_code == 200
    assert [a["auth0_sub"] for a in response.json()["data"]] == [test_account["auth0_sub"]]


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    """Health check is public."""
    response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "healthy"


@pytest.mark.asyncio
async def test_apple_app_site_association(client: AsyncClient, monkeypatch) -> None:
    """Universal links list the configured app IDs."""
    monkeypatch.setattr(
        well_known.settings, "apple_app_ids_str", "ABCDE12345.com.example.picchat"
    )

    response = await client.get("/.well-known/apple-app-site-association")

    assert response.status_code == 200
    details = response.json()["applinks"]["details"]
    assert details == [{"appID": "ABCDE12345.com.example.picchat", "paths": ["*"]}]


@pytest.mark.asyncio
async def test_get_user_by_username(db_session: AsyncSession, test_user: dict) -> None:
    """Lookups by username never expose the password hash."""
    user = await UserService().get_by_username(db_session, "alice")

    assert user["id"] == test_user["id"]
    assert "password" not in user
    assert await UserService().get_by_username(db_session, "nobody") is None


@pytest.mark.asyncio
async def test_admin_lists_applications(
    client: AsyncClient, picchat_app: dict, admin_headers: dict, auth_headers: dict
) -> None:
    """Registered tenants are visible to admins only."""
    response = await client.get("/api/applications", headers=admin_headers)
    denied = await client.get("/api/applications", headers=auth_headers)

    assert response.status_code == 200
    assert [a["app_name"] for a in response.json()["data"]] == ["PicchatBox"]
    assert denied.status_code == 403


@pytest.mark.asyncio
async def test_admin_links_account_to_user(
    client: AsyncClient,
    db_session: AsyncSession,
    test_account: dict,
    test_user: dict,
    admin_headers: dict,
) -> None:
    """An account can be attached to an existing local user."""
    response = await client.put(
        f"/api/accounts/{test_account['id']}/user",
        json={"user_id": test_user["id"]},
        headers=admin_headers,
    )
    no_user = await client.put(
        f"/api/accounts/{test_account['id']}/user", json={"user_id": 999}, headers=admin_headers
    )
    no_account = await client.put(
        "/api/accounts/999/user", json={"user_id": test_user["id"]}, headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["data"]["user_id"] == test_user["id"]
    assert no_user.status_code == 404
    assert no_account.status_code == 404

    account = await AccountService().find_by_id(db_session, test_account["id"])
    assert account["user_id"] == test_user["id"]


@pytest.mark.asyncio
async def test_admin_deletes_account_and_links(
    client: AsyncClient,
    db_session: AsyncSession,
    test_account: dict,
    admin_headers: dict,
) -> None:
    """Deleting an account removes its device links; a second delete is a 404."""
    device = await DeviceService().create_or_update(db_session, "dev-001")
    await DeviceService().link_to_account(db_session, device["id"], test_account["id"])

    response = await client.delete(f"/api/accounts/{test_account['id']}", headers=admin_headers)
    again = await client.delete(f"/api/accounts/{test_account['id']}", headers=admin_headers)

    assert response.status_code == 200
    assert again.status_code == 404
    assert await AccountService().find_by_id(db_session, test_account["id"]) is None
    assert await DeviceService().accounts_for_device(db_session, "dev-001") == []


@pytest.mark.asyncio
async def test_account_delete_requires_admin(
    client: AsyncClient, test_account: dict, account_headers: dict
) -> None:
    """Accounts cannot delete other accounts through the admin route."""
    response = await client.delete(f"/api/accounts/{test_account['id']}", headers=account_headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_sets_device_login_type(
    client: AsyncClient, db_session: AsyncSession, admin_headers: dict
) -> None:
    """The login provider of a device can be changed; unknown devices are a 404."""
    device = await DeviceService().create_or_update(db_session, "dev-001", login_type=1)

    response = await client.put(
        f"/api/devices/{device['id']}/login-type", json={"login_type": 2}, headers=admin_headers
    )
    missing = await client.put(
        "/api/devices/999/login-type", json={"login_type": 2}, headers=admin_headers
    )
    invalid = await client.put(
        f"/api/devices/{device['id']}/login-type", json={"login_type": 7}, headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["data"]["login_type"] == 2
    assert response.json()["data"]["device_number"] == "dev-001"
    assert missing.status_code == 404
    assert invalid.status_code == 400
