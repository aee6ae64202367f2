"""Migration #9: Add engravings column to entity."""

from .base import Migration


class Migration009AddEntityEngravings(Migration):
    """Migration #9: Add engravings column to entity."""

    version = 9

    sql = """
        ALTER TABLE entity ADD COLUMN engravings TEXT;
    """

    def description(self) -> str:
        """Return migration description."""
        return "Add engravings column to entity"
