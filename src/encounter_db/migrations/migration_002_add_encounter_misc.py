"""Migration #2: Add misc column to encounter."""

from .base import Migration


class Migration002AddEncounterMisc(Migration):
    """Migration #2: Add misc column to encounter."""

    version = 2

    sql = """
        ALTER TABLE encounter ADD COLUMN misc TEXT;
    """

    def description(self) -> str:
        """Return migration description."""
        return "Add misc column to encounter"
