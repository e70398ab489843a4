from sqlalchemy import Column, Integer, String
from account_registry.database import Base


class PermissionLevel(Base):
    """Static permission tier catalog (seeded at init, read-only at runtime)"""
    __tablename__ = "permission_levels"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(50), nullable=False)
    description = Column(String(255), nullable=True)
