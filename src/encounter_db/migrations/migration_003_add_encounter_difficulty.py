"""Migration #3: Add difficulty column to encounter."""

from .base import Migration


class Migration003AddEncounterDifficulty(Migration):
    """Migration #3: Add difficulty column to encounter."""

    version = 3

    sql = """
        ALTER TABLE encounter ADD COLUMN difficulty TEXT;
    """

    def description(self) -> str:
        """Return migration description."""
        return "Add difficulty column to encounter"
