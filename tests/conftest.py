import pytest
from fastapi.testclient import TestClient

from todo_api.app.core.config import Settings
from todo_api.app.core.db import Database, new_object_id
from todo_api.app.core.security import TOKEN_ACCESS, create_access_token, hash_password
from todo_api.app.main import create_app

SECRET = "test-secret"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        environment="test",
        secret_key=SECRET,
        database_url=str(tmp_path / "todo_app_test.db"),
    )


@pytest.fixture
def database(settings):
    db = Database(settings.database_url)
    db.open()
    return db


@pytest.fixture
def users(database, settings):
    """Two users with one token each."""
    seeded = []
    for email, password in (("andrew@example.com", "userOnePass"), ("jen@example.com", "userTwoPass")):
        user_id = new_object_id()
        token = create_access_token(user_id, settings.secret_key, 3600)
        with database.transaction() as cursor:
            cursor.execute(
                "INSERT INTO users (id, email, password) VALUES (?, ?, ?)",
                (user_id, email, hash_password(password)),
            )
            cursor.execute(
                "INSERT INTO user_tokens (user_id, access, token) VALUES (?, ?, ?)",
                (user_id, TOKEN_ACCESS, token),
            )
        seeded.append({"id": user_id, "email": email, "password": password, "token": token})
    return seeded


@pytest.fixture
def todos(database, users):
    """One open todo for the first user, one completed todo for the second."""
    seeded = [
        {"id": new_object_id(), "text": "First test todo", "completed": 0, "completed_at": None, "owner_id": users[0]["id"]},
        {"id": new_object_id(), "text": "Second test todo", "completed": 1, "completed_at": 333, "owner_id": users[1]["id"]},
    ]
    with database.transaction() as cursor:
        for todo in seeded:
            cursor.execute(
                "INSERT INTO todos (id, text, completed, completed_at, owner_id) VALUES (?, ?, ?, ?, ?)",
                (todo["id"], todo["text"], todo["completed"], todo["completed_at"], todo["owner_id"]),
            )
    return seeded


@pytest.fixture
def app(settings, database):
    return create_app(settings=settings, database=database)


@pytest.fixture
def client(app, todos):
    with TestClient(app) as test_client:
        yield test_client


def auth(user):
    return {"x-auth": user["token"]}


def count_rows(database, table, where="1 = 1", params=()):
    with database.transaction() as cursor:
        row = cursor.execute(f"SELECT COUNT(*) AS n FROM {table} WHERE {where}", params).fetchone()
    return row["n"]


def list_tokens(database, user_id):
    """The user's tokens in issue order, as ``{"access", "token"}`` dicts."""
    with database.transaction() as cursor:
        rows = cursor.execute(
            "SELECT access, token FROM user_tokens WHERE user_id = ? ORDER BY id", (user_id,)
        ).fetchall()
    return [{"access": row["access"], "token": row["token"]} for row in rows]


def get_user(database, email):
    with database.transaction() as cursor:
        row = cursor.execute(
            "SELECT id, email, password FROM users WHERE email = ?", (email,)
        ).fetchone()
    return dict(row) if row is not None else None
