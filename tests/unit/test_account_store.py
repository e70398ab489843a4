# -*- coding: utf-8 -*-
"""
Authorization store tests.

Covers case-insensitive uniqueness, the authorization predicate, login
counters and id allocation against an in-memory SQLite database.
"""

import threading
from datetime import timedelta

import pytest

from account_registry.database import create_db_engine, init_db, make_session_factory
from account_registry.errors import ConflictError, StorageError, ValidationError
from account_registry.models import Account
from account_registry.services import AccountStore
from account_registry.models.login_history import LoginStatus


class TestAddAccount:
    """Account creation and uniqueness"""

    def test_new_account_defaults(self, store, clock):
        created = store.add_account({"username": "alice"})

        account = store.get_account("alice")
        assert created.id == account.id
        assert account.status == 1
        assert account.permission_level == 1
        assert account.permission_name == "Basic User"
        assert account.login_count == 0
        assert account.last_login_at is None
        assert account.created_at == clock.now
        assert account.authorized is True

    def test_username_is_trimmed(self, store):
        created = store.add_account({"username": "  bob  "})
        assert created.username == "bob"

    def test_missing_username_rejected(self, store):
        with pytest.raises(ValidationError):
            store.add_account({"username": "   "})
        with pytest.raises(ValidationError):
            store.add_account({})
        assert store.count_accounts() == 0

    def test_duplicate_differing_only_in_case(self, store):
        store.add_account({"username": "alice"})

        with pytest.raises(ConflictError):
            store.add_account({"username": "ALICE"})

        assert store.count_accounts() == 1
        assert store.get_account("Alice").username == "alice"

    def test_unique_index_backs_the_precheck(self, store, clock):
        store.add_account({"username": "alice"})

        # Bypass the pre-check: the unique index still refuses the row
        with pytest.raises(StorageError):
            with store.transaction() as db:
                db.add(
                    Account(
                        username="Alice",
                        username_key="alice",
                        created_at=clock.now,
                        updated_at=clock.now,
                    )
                )
        assert store.count_accounts() == 1

    def test_unique_index_rejection_is_a_conflict(self, store, clock):
        # A pending row the pre-check cannot see (autoflush is off), as with a
        # concurrent writer that inserted between check and flush
        with pytest.raises(ConflictError):
            with store.transaction() as db:
                db.add(
                    Account(
                        username="alice",
                        username_key="alice",
                        created_at=clock.now,
                        updated_at=clock.now,
                    )
                )
                store.add_account({"username": "Alice"}, db=db)

        assert store.count_accounts() == 0

        store.add_account({"username": "alice"})
        assert store.count_accounts() == 1

    def test_concurrent_adds_create_one_account(self, tmp_path, clock):
        engine = create_db_engine(f"sqlite:///{tmp_path / 'accounts.db'}")
        init_db(engine)
        file_store = AccountStore(make_session_factory(engine), clock=clock)
        outcomes = []

        def add(name):
            try:
                file_store.add_account({"username": name})
                outcomes.append("ok")
            except ConflictError:
                outcomes.append("conflict")

        try:
            threads = [
                threading.Thread(target=add, args=("bob" if i % 2 else "Bob",))
                for i in range(8)
            ]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

            assert outcomes.count("ok") == 1
            assert outcomes.count("conflict") == 7
            assert file_store.count_accounts() == 1
        finally:
            engine.dispose()

    def test_unknown_permission_tier_falls_back(self, store):
        store.add_account({"username": "carol", "permission_level": 9})
        assert store.get_account("carol").permission_name == "Level 9"

    def test_ids_are_never_reused(self, store):
        first = store.add_account({"username": "alice"})
        store.log_login({"username": "alice"})

        assert store.delete_account("alice") is True
        second = store.add_account({"username": "alice"})

        assert second.id > first.id
        items, total = store.get_login_history("alice")
        assert total == 1
        assert items[0].username == "alice"


class TestAuthorization:
    """Authorized = exists, status 1, and expires_at unset or strictly later than now"""

    def test_unknown_account(self, store):
        result = store.check_authorization("ghost")

        assert result.authorized is False
        assert result.exists is False
        assert result.reason == "not_found"

    def test_disabled_account_never_authorized(self, store, clock):
        store.add_account({"username": "alice", "expires_at": clock.now + timedelta(days=30)})
        assert store.update_account_status("alice", 0) is True

        result = store.check_authorization("alice")
        assert result.authorized is False
        assert result.exists is True
        assert result.reason == "disabled"

    def test_expiry_equal_to_now_is_not_authorized(self, store, clock):
        expires_at = clock.now
        store.add_account({"username": "alice", "expires_at": expires_at})

        result = store.check_authorization("alice")
        assert result.authorized is False
        assert result.reason == "expired"

        clock.now = expires_at - timedelta(microseconds=1)
        assert store.check_authorization("alice").authorized is True

    def test_no_expiry_is_authorized(self, store):
        store.add_account({"username": "alice"})

        result = store.check_authorization("ALICE")
        assert result.authorized is True
        assert result.reason is None
        assert result.account.username == "alice"

    def test_reenabled_account_is_authorized(self, store):
        store.add_account({"username": "alice"})
        store.update_account_status("alice", 0)
        store.update_account_status("alice", True)

        assert store.check_authorization("alice").authorized is True

    def test_status_must_be_zero_or_one(self, store):
        store.add_account({"username": "alice"})
        with pytest.raises(ValidationError):
            store.update_account_status("alice", 5)


class TestMutations:
    def test_delete_unknown_returns_false(self, store):
        assert store.delete_account("ghost") is False

    def test_status_update_unknown_returns_false(self, store):
        assert store.update_account_status("ghost", 0) is False

    def test_sparse_update_leaves_absent_fields(self, store, clock):
        store.add_account({"username": "alice", "email": "alice@example.com", "note": "vip"})
        clock.advance(minutes=5)

        view = store.update_account_fields("alice", {"display_name": "Alice A", "note": None})

        assert view.display_name == "Alice A"
        assert view.note is None
        assert view.email == "alice@example.com"
        assert view.updated_at == clock.now

    def test_update_unknown_returns_none(self, store):
        assert store.update_account_fields("ghost", {"note": "x"}) is None

    def test_list_newest_first(self, store, clock):
        store.add_account({"username": "first"})
        clock.advance(seconds=1)
        store.add_account({"username": "second"})

        assert [a.username for a in store.list_accounts()] == ["second", "first"]


class TestLoginHistory:
    def test_successful_logins_bump_counter(self, store, clock):
        store.add_account({"username": "alice"})
        times = [clock.now + timedelta(minutes=i) for i in range(3)]

        for login_time in times:
            store.log_login({"username": "alice", "login_time": login_time})

        account = store.get_account("alice")
        assert account.login_count == 3
        assert account.last_login_at == times[-1]

    def test_failed_login_recorded_without_counter(self, store):
        store.add_account({"username": "alice"})

        store.log_login({"username": "alice", "status": 0, "error_message": "not authorized"})

        assert store.get_account("alice").login_count == 0
        items, total = store.get_login_history("alice")
        assert total == 1
        assert items[0].status == LoginStatus.FAILURE
        assert items[0].error_message == "not authorized"

    def test_unknown_account_login_still_recorded(self, store):
        store.log_login({"username": "ghost"})

        items, total = store.get_login_history("ghost")
        assert total == 1
        assert items[0].display_name is None

    def test_history_is_reverse_chronological_and_paged(self, store, clock):
        store.add_account({"username": "alice", "display_name": "Alice"})
        for i in range(5):
            store.log_login({"username": "alice", "login_time": clock.now + timedelta(minutes=i)})

        items, total = store.get_login_history("Alice", limit=2, offset=1)

        assert total == 5
        assert [item.login_time for item in items] == [
            clock.now + timedelta(minutes=3),
            clock.now + timedelta(minutes=2),
        ]
        assert items[0].display_name == "Alice"

    def test_invalid_page_rejected(self, store):
        with pytest.raises(ValidationError):
            store.get_login_history(limit=0)
        with pytest.raises(ValidationError):
            store.get_operation_logs(offset=-1)


class TestOperationLog:
    def test_details_round_trip(self, store):
        details = {"action": "disable", "usernames": ["a", "b"], "nested": {"n": 1, "ok": True}}
        store.log_operation({"operation": "BATCH_DISABLE", "operator": "admin", "details": details})

        items, total = store.get_operation_logs()
        assert total == 1
        assert items[0].details == details

    def test_missing_details_read_as_empty(self, store):
        store.log_operation({"operation": "NOOP"})

        items, _ = store.get_operation_logs()
        assert items[0].details == {}
        assert items[0].operator == "system"

    def test_filter_by_operator(self, store):
        store.log_operation({"operation": "A", "operator": "admin"})
        store.log_operation({"operation": "B", "operator": "ops"})

        items, total = store.get_operation_logs(operator="ops")
        assert total == 1
        assert items[0].operation == "B"


class TestStatistics:
    def test_counts(self, store, clock):
        store.add_account({"username": "active"})
        store.add_account({"username": "expired", "expires_at": clock.now - timedelta(days=1)})
        store.add_account({"username": "disabled", "permission_level": 3})
        store.update_account_status("disabled", 0)
        clock.advance(days=10)
        store.add_account({"username": "fresh", "permission_level": 2})

        stats = store.account_statistics()

        assert stats.total_accounts == 4
        assert stats.active_accounts == 3
        assert stats.disabled_accounts == 1
        assert stats.authorized_accounts == 2
        assert stats.expired_accounts == 1
        assert stats.recent_created == 1
        assert stats.permission_breakdown == {"level_1": 2, "level_2": 1, "level_3": 1}
        assert stats.generated_at == clock.now
