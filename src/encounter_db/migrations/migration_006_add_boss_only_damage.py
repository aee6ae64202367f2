"""Migration #6: Add boss_only_damage flag to encounter."""

from .base import Migration


class Migration006AddBossOnlyDamage(Migration):
    """Migration #6: Add boss_only_damage flag to encounter."""

    version = 6

    sql = """
        ALTER TABLE encounter ADD COLUMN boss_only_damage BOOLEAN NOT NULL DEFAULT 0;
    """

    def description(self) -> str:
        """Return migration description."""
        return "Add boss_only_damage flag to encounter"
