from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from account_registry.database import Base


def normalize_username(username: str) -> str:
    """Key used for case-insensitive username matching."""
    return username.strip().lower()


class Account(Base):
    """Authorized account registry entry"""
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    username = Column(String(100), nullable=False)
    # Lower-cased username; the unique index is the final authority on duplicates
    username_key = Column(String(100), unique=True, nullable=False, index=True)
    display_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    permission_level = Column(Integer, default=1, nullable=False)
    status = Column(Integer, default=1, nullable=False)  # 1 = active, 0 = disabled
    expires_at = Column(DateTime, nullable=True)  # NULL = never expires
    note = Column(Text, nullable=True)
    created_by = Column(String(100), nullable=True)
    created_at = Column(DateTime, server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime, server_default=func.current_timestamp(), nullable=False)
    # Only touched by successful login events
    last_login_at = Column(DateTime, nullable=True)
    login_count = Column(Integer, default=0, nullable=False)

    # AUTOINCREMENT keeps ids from being reused after a delete
    __table_args__ = {"sqlite_autoincrement": True}

    def __repr__(self):
        return f"<Account(id={self.id}, username='{self.username}', status={self.status})>"
