"""Profile completion, admin user management and soft delete."""

from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from fincomm import errors
from fincomm.db.models import User
from fincomm.users.service import admin_update_user, get_user_by_id, soft_delete_user, update_profile


class TestUserService:
    async def test_profile_completion(self, db_session, member) -> None:
        user = await update_profile(db_session, member, job_title=" Analyst ", company="", linkedin=None)
        await db_session.commit()
        assert user.profile_completed is True
        assert user.job_title == "Analyst"
        assert user.company is None

    async def test_profile_requires_job_title(self, db_session, member) -> None:
        with pytest.raises(errors.ValidationError, match="Job title"):
            await update_profile(db_session, member, job_title="   ")

    async def test_admin_update_role(self, db_session, member) -> None:
        user = await admin_update_user(db_session, member.id, {"role": "admin", "company": "Banco X"})
        assert user.is_admin
        assert user.company == "Banco X"

    async def test_admin_update_rejects_unknown_role(self, db_session, member) -> None:
        with pytest.raises(errors.ValidationError, match="Role"):
            await admin_update_user(db_session, member.id, {"role": "owner"})

    async def test_soft_delete_keeps_row(self, db_session, member) -> None:
        member_id = member.id
        await soft_delete_user(db_session, member_id)
        await db_session.commit()

        assert await get_user_by_id(db_session, member_id) is None
        row = await db_session.execute(select(User.deleted_at).where(User.id == member_id))
        assert row.scalar_one() is not None

    async def test_soft_delete_twice_is_not_found(self, db_session, member) -> None:
        await soft_delete_user(db_session, member.id)
        await db_session.commit()
        with pytest.raises(errors.NotFoundError):
            await soft_delete_user(db_session, member.id)


@pytest.mark.asyncio
class TestUserEndpoints:
    async def test_me(self, client: AsyncClient, member, auth_headers) -> None:
        response = await client.get("/api/v1/users/me", headers=auth_headers(member))
        assert response.status_code == 200
        assert response.json()["name"] == "Member"
        assert response.json()["profile_completed"] is False

    async def test_me_requires_token(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/users/me")
        assert response.status_code == 401
        assert response.json()["code"] == "unauthorized"

    async def test_update_profile(self, client: AsyncClient, member, auth_headers) -> None:
        response = await client.put(
            "/api/v1/users/me/profile",
            json={"job_title": "CTO", "company": "Fintech SA", "linkedin": "https://linkedin.com/in/cto"},
            headers=auth_headers(member),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["profile_completed"] is True
        assert body["company"] == "Fintech SA"

    async def test_update_profile_missing_job_title(self, client: AsyncClient, member, auth_headers) -> None:
        response = await client.put("/api/v1/users/me/profile", json={"company": "x"}, headers=auth_headers(member))
        assert response.status_code == 422

    async def test_admin_lists_active_users_only(
        self, client: AsyncClient, make_user, admin, member, auth_headers
    ) -> None:
        await make_user(name="Ghost", deleted_at=None)
        deleted = await client.delete(f"/api/v1/users/{member.id}", headers=auth_headers(admin))
        assert deleted.json() == {"success": True}

        response = await client.get("/api/v1/users", headers=auth_headers(admin))
        names = {u["name"] for u in response.json()}
        assert "Member" not in names
        assert {"Admin", "Ghost"} <= names

    async def test_deleted_user_token_stops_working(self, client: AsyncClient, admin, member, auth_headers) -> None:
        headers = auth_headers(member)
        await client.delete(f"/api/v1/users/{member.id}", headers=auth_headers(admin))
        assert (await client.get("/api/v1/users/me", headers=headers)).status_code == 401

    async def test_admin_updates_user(self, client: AsyncClient, admin, member, auth_headers) -> None:
        response = await client.patch(
            f"/api/v1/users/{member.id}", json={"role": "admin"}, headers=auth_headers(admin)
        )
        assert response.status_code == 200
        assert response.json()["role"] == "admin"

    async def test_member_cannot_manage_users(self, client: AsyncClient, member, auth_headers) -> None:
        assert (await client.get("/api/v1/users", headers=auth_headers(member))).status_code == 403
        assert (await client.get("/api/v1/users/analytics", headers=auth_headers(member))).status_code == 403
