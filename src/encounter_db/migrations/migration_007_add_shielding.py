"""Migration #7: Add shielding totals to encounter."""

from .base import Migration


class Migration007AddShielding(Migration):
    """Migration #7: Add shielding totals to encounter."""

    version = 7

    sql = """
        ALTER TABLE encounter ADD COLUMN total_shielding INTEGER DEFAULT 0;
        ALTER TABLE encounter ADD COLUMN total_effective_shielding INTEGER DEFAULT 0;
        ALTER TABLE encounter ADD COLUMN applied_shield_buffs TEXT;
    """

    def description(self) -> str:
        """Return migration description."""
        return "Add shielding totals to encounter"
