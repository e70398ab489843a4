from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from account_registry.database import Base


class OperationLog(Base):
    """
    Administrative action audit trail (append-only)
    """
    __tablename__ = "operation_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    operator = Column(String(100), nullable=False, index=True)
    operation = Column(String(50), nullable=False)  # e.g., "ADD_ACCOUNT", "BATCH_DELETE"
    target_username = Column(Text, nullable=True)
    details = Column(Text, nullable=True)  # JSON-serialized payload
    ip_address = Column(String(45), nullable=True)
    timestamp = Column(DateTime, server_default=func.current_timestamp(), nullable=False, index=True)

    __table_args__ = {"sqlite_autoincrement": True}

    def __repr__(self):
        return f"<OperationLog(id={self.id}, operator='{self.operator}', operation='{self.operation}')>"
