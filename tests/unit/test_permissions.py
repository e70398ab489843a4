# -*- coding: utf-8 -*-
"""
Permission catalog and time helper tests.
"""

from datetime import datetime, timedelta, timezone

from account_registry.models import PermissionLevel
from account_registry.permissions import (
    DEFAULT_PERMISSION_LEVEL,
    PERMISSION_LEVELS,
    name_for,
    seed_permission_levels,
)
from account_registry.utils.time_utils import days_ago, is_expired, to_storage


def test_catalog_tiers():
    assert {level: tier.name for level, tier in PERMISSION_LEVELS.items()} == {
        1: "Basic User",
        2: "Advanced User",
        3: "Administrator",
    }
    assert DEFAULT_PERMISSION_LEVEL == 1


def test_name_for_unknown_tier():
    assert name_for(2) == "Advanced User"
    assert name_for(7) == "Level 7"


def test_seed_is_idempotent(store):
    # init_db already seeded the catalog
    with store.transaction() as db:
        assert seed_permission_levels(db) == 0
        rows = db.query(PermissionLevel).order_by(PermissionLevel.id).all()

    assert [(row.id, row.name) for row in rows] == [
        (1, "Basic User"),
        (2, "Advanced User"),
        (3, "Administrator"),
    ]


def test_seed_restores_missing_tier(store):
    with store.transaction() as db:
        db.query(PermissionLevel).filter(PermissionLevel.id == 3).delete()

    with store.transaction() as db:
        assert seed_permission_levels(db) == 1


def test_to_storage_converts_aware_to_naive_utc():
    aware = datetime(2026, 1, 1, 9, 0, tzinfo=timezone(timedelta(hours=9)))
    assert to_storage(aware) == datetime(2026, 1, 1, 0, 0)
    assert to_storage(datetime(2026, 1, 1, 0, 0)) == datetime(2026, 1, 1, 0, 0)
    assert to_storage(None) is None


def test_is_expired_is_exclusive():
    now = datetime(2026, 1, 1, 12, 0)
    assert is_expired(None, now) is False
    assert is_expired(now, now) is True
    assert is_expired(now + timedelta(microseconds=1), now) is False
    assert is_expired(now - timedelta(seconds=1), now) is True


def test_days_ago():
    now = datetime(2026, 1, 8, 0, 0)
    assert days_ago(7, now) == datetime(2026, 1, 1, 0, 0)
