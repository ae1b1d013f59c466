from unittest.mock import patch

import pytest

from taskmanager.errors import (
    ConflictError,
    DuplicateEmailError,
    DuplicateUsernameError,
    InvalidQueryError,
    RoleNotFoundError,
    UserNotFoundError,
)
from taskmanager.schemas.user import UserCreate, UserUpdate
from taskmanager.security import verify_password


def _request(username="bob", email="bob@example.com", password="pw"):
    return UserCreate(username=username, email=email, password=password)


def test_create_user_then_get_by_id_round_trips(user_service):
    created = user_service.create_user(_request())

    fetched = user_service.get_user_by_id(created.id)
    assert fetched.username == "bob"
    assert fetched.email == "bob@example.com"
    assert fetched.roles == []


def test_create_user_with_role_round_trips_role(user_service):
    created = user_service.create_user_with_role(_request(), "ADMIN")

    fetched = user_service.get_user_by_id(created.id)
    assert fetched.roles == ["ADMIN"]
    assert user_service.get_user_by_email("bob@example.com") == fetched


def test_create_user_hashes_password(user_service):
    created = user_service.create_user(_request(password="plain-text"))

    stored = user_service.users.find_by_id(created.id)
    assert stored.hashed_password != "plain-text"
    assert verify_password("plain-text", stored.hashed_password)


def test_duplicate_username_fails_without_write(user_service):
    user_service.create_user(_request())

    with patch.object(user_service.users, "save", wraps=user_service.users.save) as save:
        with pytest.raises(DuplicateUsernameError):
            user_service.create_user(_request(email="other@example.com"))
        save.assert_not_called()


def test_duplicate_email_fails_without_write(user_service):
    user_service.create_user(_request())

    with patch.object(user_service.users, "save", wraps=user_service.users.save) as save:
        with pytest.raises(DuplicateEmailError):
            user_service.create_user(_request(username="robert"))
        save.assert_not_called()


def test_duplicates_are_conflicts():
    assert issubclass(DuplicateUsernameError, ConflictError)
    assert issubclass(DuplicateEmailError, ConflictError)


def test_create_user_with_unknown_role_fails_without_write(user_service):
    with patch.object(user_service.users, "save") as save:
        with pytest.raises(RoleNotFoundError):
            user_service.create_user_with_role(_request(), "SUPERUSER")
        save.assert_not_called()
    assert user_service.get_user_by_email("bob@example.com") is None


def test_create_user_with_role_checks_duplicates(user_service, alice):
    with pytest.raises(DuplicateUsernameError):
        user_service.create_user_with_role(_request(username="alice"), "USER")


def test_missing_lookups_return_none(user_service):
    assert user_service.get_user_by_id("missing") is None
    assert user_service.get_user_by_email("missing@example.com") is None


def test_add_role_to_user_is_idempotent(user_service, alice):
    once = user_service.add_role_to_user(alice.id, "ADMIN")
    twice = user_service.add_role_to_user(alice.id, "ADMIN")

    assert once.roles == ["ADMIN", "USER"]
    assert len(twice.roles) == len(once.roles)


def test_add_role_to_missing_user(user_service):
    with pytest.raises(UserNotFoundError):
        user_service.add_role_to_user("missing", "ADMIN")


def test_add_missing_role_to_user(user_service, alice):
    with pytest.raises(RoleNotFoundError):
        user_service.add_role_to_user(alice.id, "SUPERUSER")


def test_update_user_overwrites_username_and_email(user_service, alice):
    updated = user_service.update_user(
        alice.id, UserUpdate(username="alicia", email="alicia@example.com")
    )

    assert updated.username == "alicia"
    assert updated.email == "alicia@example.com"
    assert updated.roles == ["USER"]


def test_update_user_keeps_password_unless_given(user_service, alice):
    before = user_service.users.find_by_id(alice.id).hashed_password

    user_service.update_user(alice.id, UserUpdate(username="alice", email="alice@example.com", password=""))
    assert user_service.users.find_by_id(alice.id).hashed_password == before

    user_service.update_user(alice.id, UserUpdate(username="alice", email="alice@example.com", password="new"))
    after = user_service.users.find_by_id(alice.id).hashed_password
    assert after != before
    assert verify_password("new", after)


def test_update_missing_user_returns_none_without_write(user_service):
    with patch.object(user_service.users, "save") as save:
        assert user_service.update_user("missing", UserUpdate(username="x", email="x@example.com")) is None
        save.assert_not_called()


def test_update_user_onto_taken_username_is_rejected_by_store(user_service, alice):
    # The service does not re-check uniqueness; the unique constraint does.
    bob = user_service.create_user(_request())

    with pytest.raises(ConflictError):
        user_service.update_user(bob.id, UserUpdate(username="alice", email="bob@example.com"))

    assert user_service.get_user_by_id(bob.id).username == "bob"


def test_delete_user(user_service, alice):
    with patch.object(user_service.users, "delete_by_id", wraps=user_service.users.delete_by_id) as delete:
        assert user_service.delete_user(alice.id) is True
        delete.assert_called_once_with(alice.id)
    assert user_service.get_user_by_id(alice.id) is None


def test_delete_user_removes_role_links(db, user_service, alice):
    from sqlmodel import select

    from taskmanager.models import UserRoleLink

    user_service.add_role_to_user(alice.id, "ADMIN")
    user_service.delete_user(alice.id)

    assert db.exec(select(UserRoleLink).where(UserRoleLink.user_id == alice.id)).all() == []


def test_delete_missing_user_returns_false_without_write(user_service):
    with patch.object(user_service.users, "delete_by_id") as delete:
        assert user_service.delete_user("missing") is False
        delete.assert_not_called()


def test_delete_user_removes_owned_tasks(user_service, task_service, alice, make_task):
    make_task("Mine")

    user_service.delete_user(alice.id)

    assert task_service.get_all_tasks() == []


def test_load_user_for_authentication(user_service, alice):
    user_service.add_role_to_user(alice.id, "ADMIN")

    principal = user_service.load_user_for_authentication("alice")
    assert principal.username == "alice"
    assert verify_password("secret", principal.password_hash)
    assert principal.authorities == ("ROLE_ADMIN", "ROLE_USER")


def test_load_missing_user_for_authentication(user_service):
    with pytest.raises(UserNotFoundError):
        user_service.load_user_for_authentication("nobody")


def test_get_all_users_pages_and_sorts(user_service):
    for name in ("carol", "alice", "bob"):
        user_service.create_user(_request(username=name, email=f"{name}@example.com"))

    first = user_service.get_all_users(page=0, size=2, sort="username,asc")
    assert [u.username for u in first.content] == ["alice", "bob"]
    assert first.total_elements == 3
    assert first.total_pages == 2

    second = user_service.get_all_users(page=1, size=2, sort="username,asc")
    assert [u.username for u in second.content] == ["carol"]

    descending = user_service.get_all_users(page=0, size=10, sort="username,desc")
    assert [u.username for u in descending.content] == ["carol", "bob", "alice"]


def test_get_all_users_clamps_page_size(user_service, alice):
    page = user_service.get_all_users(page=0, size=5000)
    assert page.size == 2000
    assert [u.username for u in page.content] == ["alice"]


def test_get_all_users_rejects_offset_beyond_64_bits(user_service):
    with pytest.raises(InvalidQueryError):
        user_service.get_all_users(page=10 ** 18, size=100)


def test_get_all_users_empty_page(user_service):
    page = user_service.get_all_users(page=5, size=10)
    assert page.content == []
    assert page.total_elements == 0


@pytest.mark.parametrize("sort", ["password,asc", "username,sideways"])
def test_get_all_users_rejects_bad_sort(user_service, sort):
    with pytest.raises(InvalidQueryError):
        user_service.get_all_users(sort=sort)


def test_get_all_users_accepts_created_at_alias(user_service, alice):
    page = user_service.get_all_users(sort="createdAt,desc")
    assert [u.username for u in page.content] == ["alice"]
