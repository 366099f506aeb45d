# ==============================================================================
# QUERY TESTS
# ==============================================================================
# Filter operators, projections, ordering and raw SQL passthrough
# ==============================================================================

import pytest

from filevault.core.exceptions import ConstraintViolationError, InvalidQueryError
from filevault.database import RecordStore, Table
from filevault.database.query import equality_fields, group_rows, unique_key_sets


@pytest.fixture
def file_rows():
    def build(owner_id: str, folder_id: str = None):
        return [
            {"name": "report_2023.pdf", "size": 500, "storage_path": "a", "owner_id": owner_id},
            {"name": "report-2024.pdf", "size": 1500, "storage_path": "b", "owner_id": owner_id},
            {"name": "photo.png", "size": 4000, "storage_path": "c", "owner_id": owner_id,
             "folder_id": folder_id},
            {"name": "notes.txt", "size": 0, "storage_path": "d", "owner_id": owner_id,
             "is_deleted": True},
        ]
    return build


async def names(store: RecordStore, where) -> list:
    files = await store.find_many(Table.FILE, where=where, order_by={"name": "asc"})
    return [f.name for f in files]


class TestFilters:
    """Tests for where-clause operators."""

    @pytest.mark.asyncio
    async def test_comparison_operators(self, store: RecordStore, owner, file_rows):
        await store.insert(Table.FILE, file_rows(owner.id))

        assert await names(store, {"size": {"gte": 500, "lt": 4000}}) == [
            "report-2024.pdf",
            "report_2023.pdf",
        ]
        assert await names(store, {"size": {"gt": 1500}}) == ["photo.png"]
        assert await names(store, {"size": {"lte": 0}}) == ["notes.txt"]

    @pytest.mark.asyncio
    async def test_string_operators(self, store: RecordStore, owner, file_rows):
        await store.insert(Table.FILE, file_rows(owner.id))

        assert await names(store, {"name": {"starts_with": "report"}}) == [
            "report-2024.pdf",
            "report_2023.pdf",
        ]
        assert await names(store, {"name": {"endsWith": ".png"}}) == ["photo.png"]
        # "_" is matched literally, not as a LIKE wildcard
        assert await names(store, {"name": {"contains": "t_2"}}) == ["report_2023.pdf"]

    @pytest.mark.asyncio
    async def test_null_and_logical_operators(self, store: RecordStore, owner, file_rows):
        folder = await store.insert(Table.FOLDER, {"name": "pics", "owner_id": owner.id})
        await store.insert(Table.FILE, file_rows(owner.id, folder.id))

        assert await names(store, {"folder_id": {"not": None}}) == ["photo.png"]
        assert len(await names(store, {"folder_id": None})) == 3
        assert await names(
            store,
            {"OR": [{"is_deleted": True}, {"size": {"gt": 3000}}]},
        ) == ["notes.txt", "photo.png"]
        assert await names(
            store,
            {"NOT": {"name": {"contains": "report"}}, "is_deleted": False},
        ) == ["photo.png"]
        assert await names(store, {"OR": []}) == []

    @pytest.mark.asyncio
    async def test_not_with_a_list_excludes_every_match(self, store: RecordStore, owner, file_rows):
        await store.insert(Table.FILE, file_rows(owner.id))
        where = {"NOT": [{"name": "photo.png"}, {"name": "notes.txt"}]}

        assert await names(store, where) == ["report-2024.pdf", "report_2023.pdf"]
        assert await store.count(Table.FILE, where) == 2

        result = await store.delete_many(Table.FILE, where)
        assert result.count == 2
        assert await names(store, None) == ["notes.txt", "photo.png"]

    @pytest.mark.asyncio
    async def test_not_with_one_mapping_negates_the_conjunction(
        self, store: RecordStore, owner, file_rows
    ):
        await store.insert(Table.FILE, file_rows(owner.id))

        # Only the row matching both conditions is excluded
        assert await names(
            store,
            {"NOT": {"name": {"starts_with": "report"}, "size": {"gt": 1000}}},
        ) == ["notes.txt", "photo.png", "report_2023.pdf"]

    @pytest.mark.asyncio
    async def test_in_and_not_in(self, store: RecordStore, owner, file_rows):
        await store.insert(Table.FILE, file_rows(owner.id))

        assert await names(store, {"size": {"in": [0, 4000]}}) == ["notes.txt", "photo.png"]
        assert await names(store, {"size": {"notIn": [0, 4000, 500]}}) == ["report-2024.pdf"]

    @pytest.mark.asyncio
    async def test_unknown_field_and_operator(self, store: RecordStore):
        with pytest.raises(InvalidQueryError) as exc_info:
            await store.find_many(Table.FILE, where={"title": "x"})
        assert exc_info.value.status_code == 422

        with pytest.raises(InvalidQueryError):
            await store.find_many(Table.FILE, where={"size": {"between": [1, 2]}})

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "where",
        [
            {"name": ["photo.png"]},
            {"name": ("photo.png", "notes.txt")},
            {"size": {"equals": [0]}},
            {"name": {"not": ["photo.png"]}},
            {"OR": [{"name": ["photo.png"]}]},
        ],
    )
    async def test_collection_values_need_the_in_operator(self, store: RecordStore, where):
        with pytest.raises(InvalidQueryError) as exc_info:
            await store.find_many(Table.FILE, where=where)

        assert exc_info.value.status_code == 422
        assert "'in'" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_relationships_are_not_filterable(self, store: RecordStore):
        with pytest.raises(InvalidQueryError):
            await store.find_many(Table.FILE, where={"owner": "x"})


class TestProjectionAndOrdering:
    """Tests for select and order_by."""

    @pytest.mark.asyncio
    async def test_find_many_with_select(self, store: RecordStore, owner, file_rows):
        await store.insert(Table.FILE, file_rows(owner.id))

        rows = await store.find_many(
            Table.FILE,
            select={"name": True, "size": True},
            order_by=[{"size": "desc"}],
            take=2,
        )

        assert rows == [
            {"name": "photo.png", "size": 4000},
            {"name": "report-2024.pdf", "size": 1500},
        ]

    @pytest.mark.asyncio
    async def test_empty_select_is_rejected(self, store: RecordStore):
        with pytest.raises(InvalidQueryError):
            await store.find_many(Table.FILE, select={"name": False})

    @pytest.mark.asyncio
    async def test_bad_sort_direction(self, store: RecordStore):
        with pytest.raises(InvalidQueryError):
            await store.find_many(Table.FILE, order_by={"name": "sideways"})


class TestRawQueries:
    """Tests for raw_query and execute_raw."""

    @pytest.mark.asyncio
    async def test_raw_query_returns_dict_rows(self, store: RecordStore, owner, file_rows):
        await store.insert(Table.FILE, file_rows(owner.id))

        rows = await store.raw_query(
            "SELECT owner_id, COUNT(*) AS files, SUM(size) AS total "
            "FROM files WHERE is_deleted = ? GROUP BY owner_id",
            False,
        )

        assert rows == [{"owner_id": owner.id, "files": 3, "total": 6000}]

    @pytest.mark.asyncio
    async def test_raw_query_without_rows(self, store: RecordStore):
        assert await store.raw_query("SELECT id FROM users") == []

    @pytest.mark.asyncio
    async def test_execute_raw_returns_affected_count(self, store: RecordStore, owner, file_rows):
        await store.insert(Table.FILE, file_rows(owner.id))

        affected = await store.execute_raw(
            "UPDATE files SET is_deleted = ? WHERE size > ?",
            True,
            1000,
        )

        assert affected == 2
        assert await store.count(Table.FILE, {"is_deleted": True}) == 3

    @pytest.mark.asyncio
    async def test_execute_raw_constraint_violation(self, store: RecordStore, owner):
        with pytest.raises(ConstraintViolationError):
            await store.execute_raw(
                "INSERT INTO users (id, email, hashed_password, storage_quota, storage_used) "
                "VALUES (?, ?, ?, 0, 0)",
                "dup",
                owner.email,
                "hash",
            )


class TestQueryHelpers:
    """Tests for the pure query helpers."""

    def test_equality_fields(self):
        pinned = equality_fields({
            "email": "a@example.com",
            "id": {"equals": "1"},
            "size": {"gt": 3},
            "folder_id": None,
            "OR": [{"name": "x"}],
        })

        assert pinned == {"email": "a@example.com", "id": "1"}

    def test_unique_key_sets(self):
        assert ("id",) in unique_key_sets(Table.USER)
        assert ("email",) in unique_key_sets(Table.USER)
        assert ("file_id", "version") in unique_key_sets(Table.FILE_VERSION)
        assert ("token",) in unique_key_sets(Table.SHARE)

    def test_group_rows_splits_on_key_changes(self):
        rows = [{"a": 1}, {"a": 2}, {"a": 3, "b": 1}, {"a": 4}]

        assert group_rows(rows) == [[{"a": 1}, {"a": 2}], [{"a": 3, "b": 1}], [{"a": 4}]]
