"""Migration #4: Add version, cleared and favorite columns to encounter."""

from .base import Migration


class Migration004AddEncounterFlags(Migration):
    """Migration #4: Add version, cleared and favorite columns to encounter.

    ``version`` records the log format an encounter was written with, so
    older rows default to 1. Favorites are indexed for the favorites filter.
    """

    version = 4

    sql = """
        ALTER TABLE encounter ADD COLUMN version INTEGER DEFAULT 1;
        ALTER TABLE encounter ADD COLUMN cleared BOOLEAN;
        ALTER TABLE encounter ADD COLUMN favorite BOOLEAN DEFAULT 0;
        CREATE INDEX encounter_favorite_index ON encounter (favorite);
    """

    def description(self) -> str:
        """Return migration description."""
        return "Add version, cleared and favorite columns to encounter"
