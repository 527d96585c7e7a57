from __future__ import annotations

import pytest

from backend.movie_matcher import auth, models, pairing
from backend.movie_matcher.errors import Conflict, InvalidInput


def _auth(token: str) -> dict:
    return {"Authorization": token}


def _pair(client, token: str, partner_username):
    return client.post("/pair", json={"partnerUsername": partner_username}, headers=_auth(token))


def test_create_pair_returns_partner_profile(client, make_user) -> None:
    alice = make_user("alice", full_name="Alice A")
    bob = make_user("bob", full_name="Bob B")

    response = _pair(client, alice["token"], "bob")

    assert response.status_code == 200
    assert response.json() == {"id": bob["id"], "username": "bob", "full_name": "Bob B"}


def test_pair_is_visible_from_both_sides(client, make_user) -> None:
    alice = make_user("alice", full_name="Alice A")
    bob = make_user("bob", full_name="Bob B")
    _pair(client, alice["token"], "bob")

    from_alice = client.get("/pair", headers=_auth(alice["token"])).json()
    from_bob = client.get("/pair", headers=_auth(bob["token"])).json()

    assert from_alice["username"] == "bob"
    assert from_bob == {"id": alice["id"], "username": "alice", "full_name": "Alice A"}


def test_unpaired_user_gets_empty_result_not_error(client, make_user) -> None:
    alice = make_user("alice")

    response = client.get("/pair", headers=_auth(alice["token"]))

    assert response.status_code == 200
    assert response.json() == {}


def test_get_pair_without_token_is_unauthenticated(client) -> None:
    response = client.get("/pair")

    assert response.status_code == 401
    assert "error" in response.json()


def test_pairing_is_exclusive(client, make_user) -> None:
    alice = make_user("alice")
    make_user("bob")
    carol = make_user("carol")
    assert _pair(client, alice["token"], "bob").status_code == 200

    requester_taken = _pair(client, alice["token"], "carol")
    partner_taken = _pair(client, carol["token"], "bob")

    assert requester_taken.status_code == 400
    assert requester_taken.json() == {"error": "You already have a partner"}
    assert partner_taken.status_code == 400
    assert partner_taken.json() == {"error": "This user already has a partner"}


def test_partner_cannot_start_a_second_pair_either(client, make_user) -> None:
    alice = make_user("alice")
    bob = make_user("bob")
    make_user("carol")
    _pair(client, alice["token"], "bob")

    response = _pair(client, bob["token"], "carol")

    assert response.json() == {"error": "You already have a partner"}


def test_self_pairing_is_rejected_whether_paired_or_not(client, make_user) -> None:
    alice = make_user("alice")
    make_user("bob")

    before = _pair(client, alice["token"], "alice")
    _pair(client, alice["token"], "bob")
    after = _pair(client, alice["token"], "alice")

    assert before.status_code == after.status_code == 400
    assert before.json() == after.json() == {"error": "You cannot pair with yourself"}


@pytest.mark.parametrize(
    "partner, message",
    [
        (None, "Missing partner username"),
        ("", "Missing partner username"),
        ("nobody", "Not a valid username"),
    ],
)
def test_invalid_partner_username(client, make_user, partner, message) -> None:
    alice = make_user("alice")

    response = _pair(client, alice["token"], partner)

    assert response.status_code == 400
    assert response.json() == {"error": message}


def test_unknown_username_checked_before_pairing_state(client, make_user) -> None:
    alice = make_user("alice")
    make_user("bob")
    _pair(client, alice["token"], "bob")

    response = _pair(client, alice["token"], "nobody")

    assert response.json() == {"error": "Not a valid username"}


def test_create_pair_requires_valid_token(client, make_user) -> None:
    make_user("bob")

    response = _pair(client, "bogus", "bob")

    assert response.status_code == 401


def test_store_rejects_racing_second_pair(db, session_factory) -> None:
    alice = auth.register_user(db, "alice", "pw", "Alice")
    bob = auth.register_user(db, "bob", "pw", "Bob")
    carol = auth.register_user(db, "carol", "pw", "Carol")
    pairing.create_pair(db, alice.id, "bob")

    # A second request that raced past the up-front checks, on its own session.
    with session_factory() as racing, pytest.raises(Conflict):
        pairing._record_pair(racing, carol.id, bob.id)

    assert db.query(models.Pair).count() == 1
    assert pairing.partner_id(db, bob.id) == alice.id
    assert pairing.get_pair(db, carol.id) == {}


def test_core_create_pair_errors(db) -> None:
    alice = auth.register_user(db, "alice", "pw", "Alice")

    with pytest.raises(InvalidInput):
        pairing.create_pair(db, alice.id, "alice")
    with pytest.raises(InvalidInput):
        pairing.create_pair(db, alice.id, "ghost")
