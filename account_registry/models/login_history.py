from sqlalchemy import Column, Integer, String, Text, DateTime, Enum as SQLEnum, Index
from sqlalchemy.sql import func
import enum
from account_registry.database import Base


class LoginStatus(str, enum.Enum):
    """Login event outcome"""
    SUCCESS = "success"
    FAILURE = "failure"


class LoginHistory(Base):
    """
    Append-only login history.

    `username` is a lookup-only reference: rows are kept after the account
    they mention is deleted.
    """
    __tablename__ = "login_history"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    username = Column(String(100), nullable=False)
    username_key = Column(String(100), nullable=False, index=True)
    login_time = Column(DateTime, server_default=func.current_timestamp(), nullable=False, index=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String(512), nullable=True)
    status = Column(
        SQLEnum(LoginStatus, values_callable=lambda x: [e.value for e in x]),
        default=LoginStatus.SUCCESS,
        nullable=False,
    )
    error_message = Column(Text, nullable=True)

    __table_args__ = (
        Index("ix_login_history_username_time", "username_key", "login_time"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self):
        return f"<LoginHistory(id={self.id}, username='{self.username}', status='{self.status}')>"
