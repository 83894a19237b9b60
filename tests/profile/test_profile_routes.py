# tests/profile/test_profile_routes.py
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from fastapi import HTTPException, status
from httpx import AsyncClient

from skillconnect.core.dependencies import SessionContext
from skillconnect.database.enums import UserRole
from skillconnect.database.models import Profile
from skillconnect.profile import schemas as profile_schemas
from skillconnect.profile import services as profile_services


@pytest.mark.asyncio
async def test_get_my_profile_requires_token(
    async_client: AsyncClient, override_get_db: None
) -> None:
    response = await async_client.get("/profiles/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
@patch.object(profile_services.ProfileService, "get_my_profile", new_callable=AsyncMock)
async def test_get_my_profile_returns_own_view(
    mock_get: AsyncMock,
    fake_provider_profile: Profile,
    mock_current_provider: SessionContext,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    mock_get.return_value = profile_schemas.ProfileRead.model_validate(fake_provider_profile)

    response = await async_client.get("/profiles/me")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["user_id"] == str(fake_provider_profile.user_id)
    assert data["email"] == fake_provider_profile.email
    assert data["user_type"] == "provider"
    mock_get.assert_awaited_once_with(mock_current_provider)


@pytest.mark.asyncio
@patch.object(profile_services.ProfileService, "assign_role", new_callable=AsyncMock)
async def test_assign_role_success(
    mock_assign: AsyncMock,
    fake_client_profile: Profile,
    mock_current_unassigned: SessionContext,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    mock_assign.return_value = profile_schemas.ProfileRead.model_validate(fake_client_profile)

    response = await async_client.post("/profiles/me/role", json={"role": "client"})

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["user_type"] == "client"
    mock_assign.assert_awaited_once_with(mock_current_unassigned, UserRole.CLIENT)


@pytest.mark.asyncio
@patch.object(profile_services.ProfileService, "assign_role", new_callable=AsyncMock)
async def test_assign_role_twice_conflicts(
    mock_assign: AsyncMock,
    mock_current_client: SessionContext,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    mock_assign.side_effect = HTTPException(
        status_code=status.HTTP_409_CONFLICT, detail="Role has already been assigned."
    )

    response = await async_client.post("/profiles/me/role", json={"role": "provider"})

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["detail"] == "Role has already been assigned."


@pytest.mark.asyncio
async def test_assign_role_rejects_unknown_role(
    mock_current_unassigned: SessionContext,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    response = await async_client.post("/profiles/me/role", json={"role": "admin"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


@pytest.mark.asyncio
async def test_update_my_profile_cannot_change_role(
    mock_current_client: SessionContext,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    response = await async_client.patch("/profiles/me", json={"user_type": "provider"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


@pytest.mark.asyncio
@patch.object(profile_services.ProfileService, "update_my_profile", new_callable=AsyncMock)
async def test_update_my_profile_success(
    mock_update: AsyncMock,
    fake_provider_profile: Profile,
    mock_current_provider: SessionContext,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    fake_provider_profile.bio = "Now also doing windows"
    mock_update.return_value = profile_schemas.ProfileRead.model_validate(fake_provider_profile)

    response = await async_client.patch("/profiles/me", json={"bio": "Now also doing windows"})

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["bio"] == "Now also doing windows"
    sent = mock_update.call_args.args[1]
    assert sent.model_dump(exclude_unset=True) == {"bio": "Now also doing windows"}


@pytest.mark.asyncio
@patch.object(profile_services.ProfileService, "get_public_profile", new_callable=AsyncMock)
async def test_get_public_profile_hides_contact_details(
    mock_public: AsyncMock,
    fake_provider_profile: Profile,
    mock_current_client: SessionContext,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    mock_public.return_value = profile_schemas.PublicProfileRead.model_validate(
        fake_provider_profile
    )

    response = await async_client.get(f"/profiles/{fake_provider_profile.user_id}")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["full_name"] == "Giorgi Provider"
    assert "email" not in data
    assert "phone" not in data


@pytest.mark.asyncio
@patch.object(profile_services.ProfileService, "get_public_profile", new_callable=AsyncMock)
async def test_get_public_profile_not_found(
    mock_public: AsyncMock,
    mock_current_client: SessionContext,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    mock_public.side_effect = HTTPException(status_code=404, detail="Profile not found.")

    response = await async_client.get(f"/profiles/{uuid4()}")

    assert response.status_code == status.HTTP_404_NOT_FOUND
