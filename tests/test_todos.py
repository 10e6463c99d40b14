from todo_api.app.core.db import new_object_id

from conftest import auth, count_rows


class TestCreateTodo:

    def test_creates_todo(self, client, database, users):
        text = "Test todo text"
        res = client.post("/todos", json={"text": text}, headers=auth(users[0]))
        assert res.status_code == 200
        body = res.json()
        assert body["text"] == text
        assert body["completed"] is False
        assert "completedAt" not in body
        assert body["ownerId"] == users[0]["id"]
        assert count_rows(database, "todos", "text = ?", (text,)) == 1

    def test_trims_text(self, client, users):
        res = client.post("/todos", json={"text": "  padded  "}, headers=auth(users[0]))
        assert res.status_code == 200
        assert res.json()["text"] == "padded"

    def test_rejects_invalid_body(self, client, database, users):
        res = client.post("/todos", json={}, headers=auth(users[0]))
        assert res.status_code == 400
        assert "error" in res.json()
        assert count_rows(database, "todos") == 2

    def test_rejects_blank_text(self, client, database, users):
        res = client.post("/todos", json={"text": "   "}, headers=auth(users[0]))
        assert res.status_code == 400
        assert count_rows(database, "todos") == 2

    def test_requires_auth(self, client, database):
        res = client.post("/todos", json={"text": "nope"})
        assert res.status_code == 401
        assert res.json() == {}
        assert count_rows(database, "todos") == 2


class TestListTodos:

    def test_lists_only_own_todos(self, client, users, todos):
        res = client.get("/todos", headers=auth(users[0]))
        assert res.status_code == 200
        listed = res.json()["todos"]
        assert [t["id"] for t in listed] == [todos[0]["id"]]

    def test_lists_in_creation_order(self, client, users, todos):
        client.post("/todos", json={"text": "later"}, headers=auth(users[0]))
        listed = client.get("/todos", headers=auth(users[0])).json()["todos"]
        assert [t["text"] for t in listed] == [todos[0]["text"], "later"]

    def test_empty_list(self, client, database, users, todos):
        database.delete_many("todos", "ownerId", users[0]["id"])
        res = client.get("/todos", headers=auth(users[0]))
        assert res.json() == {"todos": []}


class TestGetTodo:

    def test_returns_todo(self, client, users, todos):
        res = client.get(f"/todos/{todos[0]['id']}", headers=auth(users[0]))
        assert res.status_code == 200
        assert res.json()["todo"]["text"] == todos[0]["text"]

    def test_completed_todo_has_completed_at(self, client, users, todos):
        todo = client.get(f"/todos/{todos[1]['id']}", headers=auth(users[1])).json()["todo"]
        assert todo["completed"] is True
        assert todo["completedAt"] == 333

    def test_other_users_todo_is_not_found(self, client, users, todos):
        res = client.get(f"/todos/{todos[1]['id']}", headers=auth(users[0]))
        assert res.status_code == 404
        assert res.json() == {}

    def test_unknown_id_is_not_found(self, client, users):
        res = client.get(f"/todos/{new_object_id()}", headers=auth(users[0]))
        assert res.status_code == 404
        assert res.json() == {}

    def test_invalid_id(self, client, users):
        res = client.get("/todos/123", headers=auth(users[0]))
        assert res.status_code == 400

    def test_auth_checked_before_id(self, client):
        res = client.get("/todos/123")
        assert res.status_code == 401

    def test_create_then_fetch_round_trip(self, client, users):
        created = client.post("/todos", json={"text": "round trip"}, headers=auth(users[1])).json()
        fetched = client.get(f"/todos/{created['id']}", headers=auth(users[1])).json()["todo"]
        assert fetched["text"] == created["text"]
        assert fetched["ownerId"] == created["ownerId"] == users[1]["id"]


class TestDeleteTodo:

    def test_removes_todo(self, client, database, users, todos):
        hex_id = todos[1]["id"]
        res = client.delete(f"/todos/{hex_id}", headers=auth(users[1]))
        assert res.status_code == 200
        assert res.json()["todo"]["id"] == hex_id
        assert count_rows(database, "todos", "id = ?", (hex_id,)) == 0

    def test_does_not_remove_other_users_todo(self, client, database, users, todos):
        hex_id = todos[0]["id"]
        res = client.delete(f"/todos/{hex_id}", headers=auth(users[1]))
        assert res.status_code == 404
        assert res.json() == {}
        assert count_rows(database, "todos", "id = ?", (hex_id,)) == 1

    def test_unknown_id_is_not_found(self, client, users):
        res = client.delete(f"/todos/{new_object_id()}", headers=auth(users[1]))
        assert res.status_code == 404

    def test_invalid_id(self, client, users):
        res = client.delete("/todos/123", headers=auth(users[1]))
        assert res.status_code == 400


class TestUpdateTodo:

    def test_completes_todo(self, client, users, todos):
        body = {"text": "Updated text", "completed": True}
        res = client.patch(f"/todos/{todos[0]['id']}", json=body, headers=auth(users[0]))
        assert res.status_code == 200
        todo = res.json()["todo"]
        assert todo["text"] == body["text"]
        assert todo["completed"] is True
        assert isinstance(todo["completedAt"], int)

    def test_does_not_update_other_users_todo(self, client, database, users, todos):
        body = {"text": "Hijacked", "completed": True}
        res = client.patch(f"/todos/{todos[0]['id']}", json=body, headers=auth(users[1]))
        assert res.status_code == 404
        assert count_rows(database, "todos", "text = ?", ("Hijacked",)) == 0

    def test_clears_completed_at(self, client, users, todos):
        body = {"text": "Reopened", "completed": False, "completedAt": 12345}
        res = client.patch(f"/todos/{todos[1]['id']}", json=body, headers=auth(users[1]))
        assert res.status_code == 200
        todo = res.json()["todo"]
        assert todo["text"] == "Reopened"
        assert todo["completed"] is False
        assert "completedAt" not in todo

    def test_submitted_completed_at_is_ignored(self, client, users, todos):
        body = {"completed": True, "completedAt": 1}
        todo = client.patch(f"/todos/{todos[0]['id']}", json=body, headers=auth(users[0])).json()["todo"]
        assert todo["completedAt"] != 1

    def test_non_boolean_completed_resets(self, client, users, todos):
        res = client.patch(f"/todos/{todos[1]['id']}", json={"completed": "yes"}, headers=auth(users[1]))
        todo = res.json()["todo"]
        assert todo["completed"] is False
        assert "completedAt" not in todo
        assert todo["text"] == todos[1]["text"]

    def test_unknown_fields_are_ignored(self, client, users, todos):
        body = {"text": "still mine", "ownerId": users[1]["id"], "id": new_object_id()}
        todo = client.patch(f"/todos/{todos[0]['id']}", json=body, headers=auth(users[0])).json()["todo"]
        assert todo["id"] == todos[0]["id"]
        assert todo["ownerId"] == users[0]["id"]

    def test_invalid_id(self, client, users):
        res = client.patch("/todos/123", json={"completed": True}, headers=auth(users[0]))
        assert res.status_code == 400

    def test_unknown_id_is_not_found(self, client, users):
        res = client.patch(f"/todos/{new_object_id()}", json={"completed": True}, headers=auth(users[0]))
        assert res.status_code == 404
        assert res.json() == {}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
