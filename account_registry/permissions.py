"""
Permission Catalog

Static mapping from permission tier to display name. Accounts store the tier
id only, so the name shown for an account always comes from here (or from the
seeded `permission_levels` table, which mirrors it).
"""
import logging
from typing import NamedTuple

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class PermissionTier(NamedTuple):
    id: int
    name: str
    description: str


PERMISSION_LEVELS = {
    1: PermissionTier(1, "Basic User", "Standard access to the protected application"),
    2: PermissionTier(2, "Advanced User", "Extended features of the protected application"),
    3: PermissionTier(3, "Administrator", "Full access including account administration"),
}

DEFAULT_PERMISSION_LEVEL = 1


def name_for(level) -> str:
    """Catalog name for a tier, or "Level {n}" for tiers outside the catalog."""
    tier = PERMISSION_LEVELS.get(level)
    if tier is not None:
        return tier.name
    return f"Level {level}"


def seed_permission_levels(db: Session) -> int:
    """
    Insert catalog tiers that are missing from `permission_levels`.

    Returns:
        Number of tiers inserted
    """
    from account_registry.models.permission_level import PermissionLevel

    existing = {row.id for row in db.query(PermissionLevel.id).all()}
    inserted = 0
    for tier in PERMISSION_LEVELS.values():
        if tier.id in existing:
            continue
        db.add(PermissionLevel(id=tier.id, name=tier.name, description=tier.description))
        inserted += 1

    if inserted:
        db.flush()
        logger.info(f"Seeded {inserted} permission level(s)")
    return inserted
