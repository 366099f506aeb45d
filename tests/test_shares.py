# ==============================================================================
# SHARE ENDPOINT TESTS
# ==============================================================================

from datetime import timedelta

import pytest
from httpx import AsyncClient

from filevault.database import RecordStore, Table
from filevault.utils import utc_now
from tests.conftest import register_user


async def upload_file(client: AsyncClient, content: bytes = b"shared bytes") -> str:
    response = await client.post(
        "/api/v1/files",
        files={"file": ("report.txt", content, "text/plain")},
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]["id"]


async def create_share(client: AsyncClient, **body) -> dict:
    response = await client.post("/api/v1/shares", json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestCreateShare:
    """Tests for POST /shares."""

    @pytest.mark.asyncio
    async def test_public_file_share(self, auth_client):
        client, user_id = auth_client
        file_id = await upload_file(client)

        share = await create_share(client, file_id=file_id)

        assert share["file_id"] == file_id
        assert share["folder_id"] is None
        assert share["permission"] == "read"
        assert share["shared_by_id"] == user_id
        assert share["shared_with_id"] is None
        assert share["expires_at"] is None
        assert len(share["token"]) >= 32

    @pytest.mark.asyncio
    async def test_share_with_user_and_expiry(self, auth_client):
        client, _ = auth_client
        folder = (await client.post("/api/v1/folders", json={"name": "f"})).json()["data"]
        friend_id, _ = await register_user(client, email="friend@example.com")

        share = await create_share(
            client,
            folder_id=folder["id"],
            permission="WRITE",
            shared_with_email="Friend@Example.com",
            expires_in_hours=2,
        )

        assert share["shared_with_id"] == friend_id
        assert share["permission"] == "write"
        assert share["expires_at"] is not None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"file_id": "a", "folder_id": "b"},
            {"file_id": "a", "permission": "admin"},
            {"file_id": "a", "expires_in_hours": 0},
        ],
    )
    async def test_invalid_body(self, auth_client, body):
        client, _ = auth_client

        response = await client.post("/api/v1/shares", json=body)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_cannot_share_someone_elses_file(self, auth_client):
        client, _ = auth_client
        file_id = await upload_file(client)
        _, other = await register_user(client)

        response = await client.post("/api/v1/shares", json={"file_id": file_id}, headers=other)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unknown_recipient(self, auth_client):
        client, _ = auth_client
        file_id = await upload_file(client)

        response = await client.post(
            "/api/v1/shares",
            json={"file_id": file_id, "shared_with_email": "nobody@example.com"},
        )

        assert response.status_code == 404


class TestResolveShare:
    """Tests for GET /shares/{token}/resolve."""

    @pytest.mark.asyncio
    async def test_public_share_resolves_anonymously(self, auth_client):
        client, _ = auth_client
        file_id = await upload_file(client)
        share = await create_share(client, file_id=file_id)
        client.headers.pop("Authorization")

        response = await client.get(f"/api/v1/shares/{share['token']}/resolve")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["share"]["id"] == share["id"]
        assert data["file"]["id"] == file_id
        assert data["folder"] is None

    @pytest.mark.asyncio
    async def test_folder_share_resolves_to_folder(self, auth_client):
        client, _ = auth_client
        folder = (await client.post("/api/v1/folders", json={"name": "pics"})).json()["data"]
        share = await create_share(client, folder_id=folder["id"])

        response = await client.get(f"/api/v1/shares/{share['token']}/resolve")

        assert response.json()["data"]["folder"]["name"] == "pics"
        assert response.json()["data"]["file"] is None

    @pytest.mark.asyncio
    async def test_bound_share_requires_recipient(self, auth_client):
        client, _ = auth_client
        file_id = await upload_file(client)
        _, friend = await register_user(client, email="bound@example.com")
        _, stranger = await register_user(client)
        share = await create_share(client, file_id=file_id, shared_with_email="bound@example.com")
        url = f"/api/v1/shares/{share['token']}/resolve"

        assert (await client.get(url, headers=friend)).status_code == 200
        assert (await client.get(url, headers=stranger)).status_code == 403
        client.headers.pop("Authorization")
        assert (await client.get(url)).status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_token(self, client: AsyncClient):
        response = await client.get("/api/v1/shares/not-a-token/resolve")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_expired_share(self, auth_client, app_settings):
        client, _ = auth_client
        file_id = await upload_file(client)
        share = await create_share(client, file_id=file_id, expires_in_hours=1)

        async with RecordStore(app_settings.database_url) as store:
            await store.update(
                Table.SHARE,
                where={"id": share["id"]},
                data={"expires_at": utc_now() - timedelta(minutes=1)},
            )

        response = await client.get(f"/api/v1/shares/{share['token']}/resolve")

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_share_of_deleted_file(self, auth_client):
        client, _ = auth_client
        file_id = await upload_file(client)
        share = await create_share(client, file_id=file_id)
        await client.delete(f"/api/v1/files/{file_id}")

        response = await client.get(f"/api/v1/shares/{share['token']}/resolve")

        assert response.status_code == 404


class TestListAndRevoke:
    """Tests for listing and revoking shares."""

    @pytest.mark.asyncio
    async def test_list_only_own_shares(self, auth_client):
        client, _ = auth_client
        file_id = await upload_file(client)
        await create_share(client, file_id=file_id)
        await create_share(client, file_id=file_id, permission="write")
        _, other = await register_user(client)

        mine = await client.get("/api/v1/shares")
        theirs = await client.get("/api/v1/shares", headers=other)

        assert mine.json()["data"]["total"] == 2
        assert set(theirs.json()) == {"success", "message", "data"}
        assert theirs.json()["data"] == {
            "items": [],
            "total": 0,
            "page": 1,
            "page_size": 20,
            "pages": 0,
            "has_next": False,
            "has_prev": False,
        }

    @pytest.mark.asyncio
    async def test_revoke(self, auth_client):
        client, _ = auth_client
        share = await create_share(client, file_id=await upload_file(client))

        response = await client.delete(f"/api/v1/shares/{share['id']}")

        assert response.status_code == 200
        assert (await client.get(f"/api/v1/shares/{share['token']}/resolve")).status_code == 404
        assert (await client.delete(f"/api/v1/shares/{share['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_cannot_revoke_another_users_share(self, auth_client):
        client, _ = auth_client
        share = await create_share(client, file_id=await upload_file(client))
        _, other = await register_user(client)

        response = await client.delete(f"/api/v1/shares/{share['id']}", headers=other)

        assert response.status_code == 404
        assert (await client.get(f"/api/v1/shares/{share['token']}/resolve")).status_code == 200
