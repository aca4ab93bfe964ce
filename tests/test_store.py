from concurrent.futures import ThreadPoolExecutor

import pytest

from user_todo_api.errors import InvalidInput, NotFound, UserNotFound
from user_todo_api.repositories import InMemoryStore, ListQuery, get_store
from user_todo_api.settings import Settings


class TestUsers:
    def test_create_and_get_user(self, store):
        user = store.create_user("Alice", "alice@example.com")
        assert isinstance(user["id"], int)
        assert user["name"] == "Alice"
        assert user["email"] == "alice@example.com"
        assert store.get_user(user["id"]) == user

    def test_ids_are_unique_and_increasing(self, store):
        ids = [store.create_user(f"u{i}", f"u{i}@example.com")["id"] for i in range(5)]
        assert ids == sorted(ids)
        assert len(set(ids)) == 5

    def test_ids_are_never_reused(self, store):
        first = store.create_user("Alice", "alice@example.com")
        store.delete_user(first["id"])
        second = store.create_user("Bob", "bob@example.com")
        assert second["id"] > first["id"]

    @pytest.mark.parametrize("name,email", [("", "a@example.com"), ("Alice", ""), ("   ", "a@example.com")])
    def test_create_user_rejects_empty_fields(self, store, name, email):
        with pytest.raises(InvalidInput):
            store.create_user(name, email)
        assert store.list_users()[1] == 0

    def test_get_missing_user(self, store):
        with pytest.raises(NotFound):
            store.get_user(999)

    def test_list_users_in_insertion_order(self, store):
        a = store.create_user("Alice", "alice@example.com")
        b = store.create_user("Bob", "bob@example.com")
        items, total = store.list_users()
        assert [u["id"] for u in items] == [a["id"], b["id"]]
        assert total == 2

    def test_list_users_pagination(self, store):
        for i in range(5):
            store.create_user(f"u{i}", f"u{i}@example.com")
        items, total = store.list_users(ListQuery(limit=2, offset=1))
        assert total == 5
        assert [u["name"] for u in items] == ["u1", "u2"]

    def test_delete_user(self, store):
        user = store.create_user("Bob", "bob@example.com")
        store.delete_user(user["id"])
        with pytest.raises(NotFound):
            store.get_user(user["id"])
        assert user["id"] not in [u["id"] for u in store.list_users()[0]]
        with pytest.raises(NotFound):
            store.delete_user(user["id"])

    def test_returned_records_are_copies(self, store):
        user = store.create_user("Alice", "alice@example.com")
        user["name"] = "Mallory"
        assert store.get_user(user["id"])["name"] == "Alice"


class TestTodos:
    def test_create_todo_defaults(self, store):
        user = store.create_user("Alice", "alice@example.com")
        todo = store.create_todo(user["id"], "Buy groceries", "Milk, eggs, bread")
        assert todo["user_id"] == user["id"]
        assert todo["title"] == "Buy groceries"
        assert todo["description"] == "Milk, eggs, bread"
        assert todo["completed"] is False
        assert store.get_todo(todo["id"]) == todo

    def test_description_may_be_empty(self, store):
        user = store.create_user("Alice", "alice@example.com")
        assert store.create_todo(user["id"], "Title", "")["description"] == ""

    def test_todo_ids_independent_of_user_ids(self, store):
        for i in range(3):
            store.create_user(f"u{i}", f"u{i}@example.com")
        todo = store.create_todo(3, "First")
        assert todo["id"] == 1

    def test_create_todo_for_missing_user(self, store):
        with pytest.raises(UserNotFound):
            store.create_todo(42, "Orphan")
        assert store.list_todos()[1] == 0

    def test_user_not_found_is_a_not_found(self):
        assert issubclass(UserNotFound, NotFound)
        assert UserNotFound.kind == "UserNotFound"
        assert UserNotFound.status_code == 404

    def test_create_todo_rejects_empty_title(self, store):
        user = store.create_user("Alice", "alice@example.com")
        with pytest.raises(InvalidInput):
            store.create_todo(user["id"], "  ")
        assert store.list_todos()[1] == 0

    def test_set_status_is_idempotent(self, store):
        user = store.create_user("Alice", "alice@example.com")
        todo = store.create_todo(user["id"], "Buy groceries")
        assert store.set_todo_status(todo["id"], True)["completed"] is True
        again = store.set_todo_status(todo["id"], True)
        assert again["completed"] is True
        assert store.get_todo(todo["id"])["completed"] is True
        assert store.set_todo_status(todo["id"], False)["completed"] is False

    def test_set_status_only_changes_completed(self, store):
        user = store.create_user("Alice", "alice@example.com")
        todo = store.create_todo(user["id"], "Buy groceries", "Milk")
        updated = store.set_todo_status(todo["id"], True)
        for key in ("id", "user_id", "title", "description", "created_at"):
            assert updated[key] == todo[key]
        assert updated["updated_at"] >= todo["updated_at"]

    def test_set_status_missing_todo(self, store):
        with pytest.raises(NotFound):
            store.set_todo_status(7, True)

    def test_delete_todo(self, store):
        user = store.create_user("Alice", "alice@example.com")
        keep = store.create_todo(user["id"], "Keep")
        gone = store.create_todo(user["id"], "Gone")
        store.delete_todo(gone["id"])
        with pytest.raises(NotFound):
            store.get_todo(gone["id"])
        assert [t["id"] for t in store.list_todos()[0]] == [keep["id"]]
        with pytest.raises(NotFound):
            store.delete_todo(gone["id"])

    def test_list_todos_filters(self, store):
        alice = store.create_user("Alice", "alice@example.com")
        bob = store.create_user("Bob", "bob@example.com")
        t1 = store.create_todo(alice["id"], "A1")
        store.create_todo(alice["id"], "A2")
        t3 = store.create_todo(bob["id"], "B1")
        store.set_todo_status(t1["id"], True)

        items, total = store.list_todos(ListQuery(user_id=bob["id"]))
        assert total == 1 and items[0]["id"] == t3["id"]

        items, total = store.list_todos(ListQuery(completed=True))
        assert total == 1 and items[0]["id"] == t1["id"]

        items, total = store.list_todos(ListQuery(user_id=alice["id"], completed=False))
        assert total == 1 and items[0]["title"] == "A2"

    def test_deleting_user_keeps_its_todos(self, store):
        user = store.create_user("Bob", "bob@example.com")
        todo = store.create_todo(user["id"], "Write documentation")
        store.delete_user(user["id"])

        kept = store.get_todo(todo["id"])
        assert kept["user_id"] == user["id"]
        assert store.set_todo_status(todo["id"], True)["completed"] is True
        store.delete_todo(todo["id"])
        # The dangling reference does not allow new todos for the deleted user
        with pytest.raises(UserNotFound):
            store.create_todo(user["id"], "Too late")


class TestConcurrency:
    def test_concurrent_user_creates_get_distinct_ids(self, store):
        with ThreadPoolExecutor(max_workers=8) as pool:
            users = list(pool.map(lambda i: store.create_user(f"u{i}", f"u{i}@example.com"), range(100)))
        ids = [u["id"] for u in users]
        assert len(set(ids)) == 100
        assert store.list_users()[1] == 100

    def test_concurrent_todo_creates_get_distinct_ids(self, store):
        user = store.create_user("Alice", "alice@example.com")
        with ThreadPoolExecutor(max_workers=8) as pool:
            todos = list(pool.map(lambda i: store.create_todo(user["id"], f"t{i}"), range(100)))
        assert len({t["id"] for t in todos}) == 100

    def test_create_todo_racing_user_delete(self, store):
        users = [store.create_user(f"u{i}", f"u{i}@example.com") for i in range(20)]
        witness = store.create_user("Witness", "witness@example.com")

        def create(user):
            try:
                return store.create_todo(user["id"], "racing")
            except UserNotFound:
                return None

        def delete(user):
            store.delete_user(user["id"])
            # Any todo id issued from here on was allocated after the delete
            return user["id"], store.create_todo(witness["id"], "marker")["id"]

        with ThreadPoolExecutor(max_workers=8) as pool:
            created = pool.map(create, users)
            markers = dict(pool.map(delete, users))
            created = [t for t in created if t is not None]

        # Every racing todo was inserted while its owner still existed
        for todo in created:
            assert todo["id"] < markers[todo["user_id"]]
        for user in users:
            with pytest.raises(UserNotFound):
                store.create_todo(user["id"], "after delete")

        assert [u["id"] for u in store.list_users()[0]] == [witness["id"]]
        assert store.list_todos()[1] == len(created) + len(users)


class TestFactory:
    def test_memory_backend(self):
        assert isinstance(get_store(Settings()), InMemoryStore)

    def test_sqlite_backend(self, tmp_path):
        from user_todo_api.db import SQLiteStore

        store = get_store(Settings(persistence_backend="sqlite", sqlite_db_path=str(tmp_path / "x.db")))
        assert isinstance(store, SQLiteStore)

    def test_sqlite_rejects_memory_path(self):
        from user_todo_api.db import SQLiteStore

        with pytest.raises(ValueError):
            SQLiteStore(":memory:")

    def test_sqlite_data_survives_reopen(self, tmp_path):
        from user_todo_api.db import SQLiteStore

        path = str(tmp_path / "durable.db")
        first = SQLiteStore(path)
        user = first.create_user("Alice", "alice@example.com")
        first.create_todo(user["id"], "Persist me")

        second = SQLiteStore(path)
        assert second.get_user(user["id"])["name"] == "Alice"
        assert second.list_todos()[0][0]["title"] == "Persist me"


class TestOutOfRangeIds:
    HUGE = 2 ** 64

    def test_lookups_report_not_found(self, store):
        with pytest.raises(NotFound):
            store.get_user(self.HUGE)
        with pytest.raises(NotFound):
            store.delete_user(self.HUGE)
        with pytest.raises(NotFound):
            store.get_todo(-self.HUGE)
        with pytest.raises(NotFound):
            store.set_todo_status(self.HUGE, True)
        with pytest.raises(NotFound):
            store.delete_todo(self.HUGE)

    def test_create_todo_reports_user_not_found(self, store):
        with pytest.raises(UserNotFound):
            store.create_todo(self.HUGE, "Unreachable owner")
        assert store.list_todos()[1] == 0

    def test_filters_and_offsets_match_nothing(self, store):
        user = store.create_user("Alice", "alice@example.com")
        store.create_todo(user["id"], "Real")
        assert store.list_todos(ListQuery(user_id=self.HUGE)) == ([], 0)
        items, total = store.list_users(ListQuery(offset=self.HUGE))
        assert items == [] and total == 1
