#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Database initialization script

Creates the tables, seeds the permission catalog and prints what the store
currently holds.

Usage:
    python scripts/init_db.py [DATABASE_URL]

Example:
    python scripts/init_db.py sqlite:///./accounts.db
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from account_registry.config import get_settings
from account_registry.database import create_db_engine, init_db, make_session_factory
from account_registry.permissions import PERMISSION_LEVELS
from account_registry.services import AccountStore


def main(database_url: str = None) -> int:
    database_url = database_url or get_settings().DATABASE_URL
    engine = create_db_engine(database_url)
    try:
        init_db(engine)
        store = AccountStore(make_session_factory(engine))

        print(f"Database ready: {engine.url.render_as_string(hide_password=True)}")
        print("")
        print("Permission levels:")
        for tier in PERMISSION_LEVELS.values():
            print(f"   {tier.id}. {tier.name} - {tier.description}")

        accounts = store.list_accounts()
        print("")
        print(f"Accounts: {len(accounts)}")
        for account in accounts:
            state = "authorized" if account.authorized else "not authorized"
            expires = account.expires_at or "never"
            print(f"   - {account.username} [{account.permission_name}] {state}, expires: {expires}")
        return 0
    finally:
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else None))
