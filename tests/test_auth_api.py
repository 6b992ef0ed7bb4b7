import pytest

from auth_api import hash_password, verify_password
from database import create_user

from conftest import register_and_login


def test_register_twice_fails_second_time(client) -> None:
    first = client.post("/register", json={"username": "alice", "password": "pw1"})
    second = client.post("/register", json={"username": "alice", "password": "pw2"})

    assert first.status_code == 200
    assert first.json() == {"success": True}
    assert second.json() == {"success": False, "message": "User already exists or DB error"}


def test_usernames_are_case_sensitive(client) -> None:
    assert client.post("/register", json={"username": "Bob", "password": "pw"}).json()["success"]
    assert client.post("/register", json={"username": "bob", "password": "pw"}).json()["success"]


def test_register_requires_both_fields(client) -> None:
    for body in ({"username": "", "password": "pw"}, {"username": "carol"}, {}):
        response = client.post("/register", json=body)
        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Username and password required"}


def test_login_success_and_failure_messages_are_distinct(client) -> None:
    client.post("/register", json={"username": "dave", "password": "right"})

    ok = client.post("/login", json={"username": "dave", "password": "right"})
    wrong = client.post("/login", json={"username": "dave", "password": "wrong"})
    missing = client.post("/login", json={"username": "nobody", "password": "right"})

    assert ok.json() == {"success": True}
    assert wrong.json() == {"success": False, "message": "Invalid password"}
    assert missing.json() == {"success": False, "message": "User not found"}


def test_login_accepts_form_bodies(client) -> None:
    client.post("/register", data={"username": "erin", "password": "pw"})
    response = client.post("/login", data={"username": "erin", "password": "pw"})
    assert response.json() == {"success": True}


def test_login_sets_authenticated_session(client) -> None:
    assert client.get("/demo-status").json() == {"isDemo": True, "remainingTries": 3}
    register_and_login(client)
    assert client.get("/demo-status").json() == {"isDemo": False, "remainingTries": None}


def test_logout_destroys_session_and_redirects(client) -> None:
    register_and_login(client)

    response = client.get("/logout", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "/login.html"
    assert client.get("/demo-status").json()["isDemo"] is True


def test_passwords_are_stored_salted(session_factory, client) -> None:
    client.post("/register", json={"username": "frank", "password": "same"})
    client.post("/register", json={"username": "grace", "password": "same"})

    from database import get_user_by_username

    db = session_factory()
    try:
        frank = get_user_by_username(db, "frank").password_hash
        grace = get_user_by_username(db, "grace").password_hash
    finally:
        db.close()

    assert frank != grace
    assert "same" not in frank


def test_verify_password_round_trip() -> None:
    hashed = hash_password("hunter2", iterations=1000)
    assert verify_password("hunter2", hashed)
    assert not verify_password("hunter3", hashed)
    assert not verify_password("hunter2", "not-a-hash")


@pytest.mark.parametrize(
    "stored",
    [
        "pbkdf2_sha256$many$c2FsdA==$abc",
        "pbkdf2_sha256$1000$!!not-base64!!$abc",
        "pbkdf2_sha256$-5$c2FsdA==$abc",
        "bcrypt$12$c2FsdA==$abc",
    ],
)
def test_verify_password_rejects_corrupt_hashes(stored: str) -> None:
    assert not verify_password("pw", stored)


def test_login_against_corrupt_stored_hash(client, session_factory) -> None:
    db = session_factory()
    try:
        create_user(db, "henry", "pbkdf2_sha256$oops$???$abc")
    finally:
        db.close()

    response = client.post("/login", json={"username": "henry", "password": "pw"})

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Invalid password"}


def test_malformed_multipart_login_gets_error_envelope(client) -> None:
    response = client.post(
        "/login",
        content=b"garbage",
        headers={"content-type": "multipart/form-data"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"]
    assert "detail" not in body
