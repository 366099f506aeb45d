# ==============================================================================
# RECORD STORE TESTS
# ==============================================================================
# CRUD, batch writes, upsert and pagination through RecordStore
# ==============================================================================

from uuid import UUID

import pytest

from filevault.core.exceptions import (
    ConstraintViolationError,
    InvalidQueryError,
    RecordNotFoundError,
)
from filevault.database import BatchPayload, RecordStore, Table


def user_row(n: int) -> dict:
    return {
        "email": f"user{n:02d}@example.com",
        "name": f"User {n:02d}",
        "hashed_password": "hash",
    }


class TestInsert:
    """Tests for single and batch inserts."""

    @pytest.mark.asyncio
    async def test_insert_single_returns_record(self, store: RecordStore):
        user = await store.insert(Table.USER, user_row(1))

        assert user.id
        assert str(UUID(user.id)) == user.id
        assert user.email == "user01@example.com"
        assert user.storage_used == 0
        assert user.created_at is not None

        # Readable after the session closed
        data = user.to_dict()
        assert data["id"] == user.id
        assert data["email"] == "user01@example.com"
        assert data["hashed_password"] == "hash"

    @pytest.mark.asyncio
    async def test_insert_single_duplicate_raises_constraint_violation(self, store: RecordStore):
        await store.insert("User", user_row(1))

        with pytest.raises(ConstraintViolationError) as exc_info:
            await store.insert("User", user_row(1))

        assert exc_info.value.status_code == 409
        assert exc_info.value.table == "User"
        assert exc_info.value.__cause__ is not None

    @pytest.mark.asyncio
    async def test_insert_batch_returns_count(self, store: RecordStore):
        result = await store.insert(Table.USER, [user_row(n) for n in range(5)])

        assert result == BatchPayload(count=5)
        assert await store.count(Table.USER) == 5

    @pytest.mark.asyncio
    async def test_insert_batch_twice_skips_duplicates(self, store: RecordStore):
        rows = [user_row(n) for n in range(4)]

        first = await store.insert(Table.USER, rows)
        second = await store.insert(Table.USER, rows)

        assert first.count == 4
        assert second.count == 0
        assert await store.count(Table.USER) == 4

    @pytest.mark.asyncio
    async def test_insert_batch_without_skip_rejects_duplicates(self, store: RecordStore):
        await store.insert(Table.USER, [user_row(1)])

        with pytest.raises(ConstraintViolationError):
            await store.insert(Table.USER, [user_row(2), user_row(1)], skip_duplicates=False)

        # The whole batch rolled back
        assert await store.count(Table.USER) == 1

    @pytest.mark.asyncio
    async def test_insert_batch_with_mixed_keys(self, store: RecordStore):
        rows = [user_row(1), {**user_row(2), "storage_quota": 10}, user_row(3)]

        result = await store.insert(Table.USER, rows)

        assert result.count == 3
        second = await store.find_unique(Table.USER, {"email": "user02@example.com"})
        assert second.storage_quota == 10

    @pytest.mark.asyncio
    async def test_insert_empty_batch(self, store: RecordStore):
        assert await store.insert(Table.USER, []) == BatchPayload(count=0)

    @pytest.mark.asyncio
    async def test_insert_unknown_field(self, store: RecordStore):
        with pytest.raises(InvalidQueryError):
            await store.insert(Table.USER, {**user_row(1), "nickname": "x"})


class TestFind:
    """Tests for find_unique, find_first and find_many."""

    @pytest.mark.asyncio
    async def test_find_unique_by_id_and_email(self, store: RecordStore):
        user = await store.insert(Table.USER, user_row(1))

        by_id = await store.find_unique(Table.USER, {"id": user.id})
        by_email = await store.find_unique(Table.USER, {"email": user.email})

        assert by_id.id == by_email.id == user.id

    @pytest.mark.asyncio
    async def test_find_unique_missing_returns_none(self, store: RecordStore):
        assert await store.find_unique(Table.USER, {"id": "missing"}) is None

    @pytest.mark.asyncio
    async def test_find_unique_requires_unique_filter(self, store: RecordStore):
        with pytest.raises(InvalidQueryError):
            await store.find_unique(Table.USER, {"name": "User 01"})

    @pytest.mark.asyncio
    async def test_find_unique_with_select_returns_dict(self, store: RecordStore):
        user = await store.insert(Table.USER, user_row(1))

        found = await store.find_unique(
            Table.USER,
            {"id": user.id},
            select={"email": True, "name": True, "hashed_password": False},
        )

        assert found == {"email": "user01@example.com", "name": "User 01"}

    @pytest.mark.asyncio
    async def test_find_unique_by_compound_key(self, store: RecordStore, owner):
        file = await store.insert(
            Table.FILE,
            {"name": "a.txt", "storage_path": "p/1", "owner_id": owner.id},
        )
        await store.insert(
            Table.FILE_VERSION,
            [
                {"file_id": file.id, "version": 1, "size": 1, "storage_path": "p/1"},
                {"file_id": file.id, "version": 2, "size": 2, "storage_path": "p/2"},
            ],
        )

        version = await store.find_unique(
            Table.FILE_VERSION,
            {"file_id": file.id, "version": 2},
        )

        assert version.storage_path == "p/2"

    @pytest.mark.asyncio
    async def test_find_first_respects_order(self, store: RecordStore):
        await store.insert(Table.USER, [user_row(n) for n in range(3)])

        first = await store.find_first(Table.USER, order_by={"email": "desc"})

        assert first.email == "user02@example.com"

    @pytest.mark.asyncio
    async def test_find_first_no_match(self, store: RecordStore):
        assert await store.find_first(Table.USER, {"name": "nobody"}) is None

    @pytest.mark.asyncio
    async def test_find_many_filters(self, store: RecordStore):
        await store.insert(Table.USER, [user_row(n) for n in range(10)])

        found = await store.find_many(
            Table.USER,
            where={"email": {"in": ["user01@example.com", "user07@example.com"]}},
            order_by={"email": "asc"},
        )

        assert [user.email for user in found] == [
            "user01@example.com",
            "user07@example.com",
        ]

    @pytest.mark.asyncio
    async def test_page_and_skip_take_read_the_same_window(self, store: RecordStore):
        await store.insert(Table.USER, [user_row(n) for n in range(25)])
        order = {"email": "asc"}

        paged = await store.find_many(Table.USER, order_by=order, page=2, per_page=10)
        windowed = await store.find_many(Table.USER, order_by=order, skip=10, take=10)

        assert [u.id for u in paged] == [u.id for u in windowed]
        assert paged[0].email == "user10@example.com"
        assert len(paged) == 10

    @pytest.mark.asyncio
    async def test_find_many_without_pagination_returns_all(self, store: RecordStore):
        await store.insert(Table.USER, [user_row(n) for n in range(30)])

        assert len(await store.find_many(Table.USER)) == 30

    @pytest.mark.asyncio
    async def test_find_many_last_partial_page(self, store: RecordStore):
        await store.insert(Table.USER, [user_row(n) for n in range(25)])

        page = await store.find_many(Table.USER, order_by={"email": "asc"}, page=3, per_page=10)

        assert len(page) == 5

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs",
        [{"page": 0, "per_page": 10}, {"skip": -1}, {"take": -5}, {"per_page": -1}],
    )
    async def test_find_many_rejects_bad_pagination(self, store: RecordStore, kwargs):
        with pytest.raises(InvalidQueryError):
            await store.find_many(Table.USER, **kwargs)

    @pytest.mark.asyncio
    async def test_count_matches_find_many(self, store: RecordStore):
        rows = [user_row(n) for n in range(12)]
        for row in rows[:5]:
            row["storage_quota"] = 1
        await store.insert(Table.USER, rows)

        for where in (None, {"storage_quota": 1}, {"storage_quota": {"gt": 1}}):
            assert await store.count(Table.USER, where) == len(
                await store.find_many(Table.USER, where=where)
            )


class TestUpdate:
    """Tests for update, update_many and atomic operators."""

    @pytest.mark.asyncio
    async def test_update_returns_updated_record(self, store: RecordStore):
        user = await store.insert(Table.USER, user_row(1))

        updated = await store.update(Table.USER, {"id": user.id}, {"name": "Renamed"})

        assert updated.name == "Renamed"
        assert (await store.find_unique(Table.USER, {"id": user.id})).name == "Renamed"

    @pytest.mark.asyncio
    async def test_update_missing_record_raises_and_changes_nothing(self, store: RecordStore):
        await store.insert(Table.USER, [user_row(n) for n in range(3)])

        with pytest.raises(RecordNotFoundError) as exc_info:
            await store.update(Table.USER, {"id": "missing"}, {"name": "Ghost"})

        assert exc_info.value.status_code == 404
        assert exc_info.value.operation == "update"
        assert await store.count(Table.USER, {"name": "Ghost"}) == 0

    @pytest.mark.asyncio
    async def test_atomic_increment_and_decrement(self, store: RecordStore):
        user = await store.insert(Table.USER, user_row(1))

        await store.update(Table.USER, {"id": user.id}, {"storage_used": {"increment": 300}})
        updated = await store.update(
            Table.USER,
            {"id": user.id},
            {"storage_used": {"decrement": 100}},
        )

        assert updated.storage_used == 200

    @pytest.mark.asyncio
    async def test_multiply_and_divide(self, store: RecordStore):
        user = await store.insert(Table.USER, {**user_row(1), "storage_used": 10})

        await store.update(Table.USER, {"id": user.id}, {"storage_used": {"multiply": 3}})
        updated = await store.update(Table.USER, {"id": user.id}, {"storage_used": {"divide": 4}})

        assert updated.storage_used == 7

    @pytest.mark.asyncio
    async def test_unknown_update_operator(self, store: RecordStore):
        user = await store.insert(Table.USER, user_row(1))

        with pytest.raises(InvalidQueryError):
            await store.update(Table.USER, {"id": user.id}, {"storage_used": {"push": 1}})

    @pytest.mark.asyncio
    async def test_update_with_empty_data_returns_record(self, store: RecordStore):
        user = await store.insert(Table.USER, user_row(1))

        same = await store.update(Table.USER, {"id": user.id}, {})

        assert same.id == user.id

    @pytest.mark.asyncio
    async def test_update_into_duplicate_raises_constraint_violation(self, store: RecordStore):
        await store.insert(Table.USER, user_row(1))
        second = await store.insert(Table.USER, user_row(2))

        with pytest.raises(ConstraintViolationError):
            await store.update(Table.USER, {"id": second.id}, {"email": "user01@example.com"})

    @pytest.mark.asyncio
    async def test_update_many(self, store: RecordStore):
        await store.insert(Table.USER, [user_row(n) for n in range(6)])

        result = await store.update_many(
            Table.USER,
            {"email": {"starts_with": "user0"}, "name": {"not": {"in": ["User 00"]}}},
            {"storage_quota": 5},
        )

        assert result == BatchPayload(count=5)
        assert await store.count(Table.USER, {"storage_quota": 5}) == 5


class TestUpsert:
    """Tests for upsert."""

    @pytest.mark.asyncio
    async def test_upsert_twice_creates_then_updates(self, store: RecordStore):
        where = {"email": "upsert@example.com"}
        create = {"email": "upsert@example.com", "name": "First", "hashed_password": "h"}

        created = await store.upsert(Table.USER, where, update={"name": "Second"}, create=create)
        updated = await store.upsert(Table.USER, where, update={"name": "Second"}, create=create)

        assert created.name == "First"
        assert updated.name == "Second"
        assert updated.id == created.id
        assert await store.count(Table.USER, where) == 1

    @pytest.mark.asyncio
    async def test_upsert_without_create_fills_filter_fields(self, store: RecordStore):
        where = {"email": "pinned@example.com"}
        data = {"name": "Pinned", "hashed_password": "h"}

        first = await store.upsert(Table.USER, where, update=data)
        second = await store.upsert(Table.USER, where, update=data)

        assert first.email == "pinned@example.com"
        assert second.id == first.id
        assert await store.count(Table.USER) == 1

    @pytest.mark.asyncio
    async def test_upsert_requires_unique_filter(self, store: RecordStore):
        with pytest.raises(InvalidQueryError):
            await store.upsert(Table.USER, {"name": "x"}, update={"name": "y"})


class TestDelete:
    """Tests for delete and delete_many."""

    @pytest.mark.asyncio
    async def test_delete_returns_deleted_record(self, store: RecordStore):
        user = await store.insert(Table.USER, user_row(1))

        deleted = await store.delete(Table.USER, {"id": user.id})

        assert deleted.email == "user01@example.com"
        assert await store.find_unique(Table.USER, {"id": user.id}) is None

    @pytest.mark.asyncio
    async def test_delete_missing_record(self, store: RecordStore):
        with pytest.raises(RecordNotFoundError) as exc_info:
            await store.delete(Table.USER, {"id": "missing"})

        assert exc_info.value.operation == "delete"

    @pytest.mark.asyncio
    async def test_delete_cascades_to_children(self, store: RecordStore, owner):
        folder = await store.insert(Table.FOLDER, {"name": "docs", "owner_id": owner.id})
        await store.insert(
            Table.FILE,
            {"name": "a.txt", "storage_path": "p", "owner_id": owner.id, "folder_id": folder.id},
        )

        await store.delete(Table.FOLDER, {"id": folder.id})

        assert await store.count(Table.FILE) == 0

    @pytest.mark.asyncio
    async def test_foreign_keys_are_enforced(self, store: RecordStore):
        with pytest.raises(ConstraintViolationError):
            await store.insert(Table.FOLDER, {"name": "orphan", "owner_id": "missing"})

    @pytest.mark.asyncio
    async def test_delete_many(self, store: RecordStore):
        await store.insert(Table.USER, [user_row(n) for n in range(5)])

        result = await store.delete_many(
            Table.USER,
            {"OR": [{"email": "user01@example.com"}, {"email": "user03@example.com"}]},
        )

        assert result.count == 2
        assert await store.count(Table.USER) == 3
