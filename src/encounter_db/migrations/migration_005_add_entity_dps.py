"""Migration #5: Add dps column to entity and backfill derived values."""

from .base import Migration


class Migration005AddEntityDps(Migration):
    """Migration #5: Add dps column to entity and backfill derived values.

    Before this migration an entity's dps and an encounter's raid clear
    were only stored inside JSON blobs. Both are copied out into real
    columns so they can be sorted and filtered on.
    """

    version = 5

    sql = """
        ALTER TABLE entity ADD COLUMN dps INTEGER;
        UPDATE entity
            SET dps = coalesce(json_extract(damage_stats, '$.dps'), 0)
            WHERE dps IS NULL;
        UPDATE encounter
            SET cleared = coalesce(json_extract(misc, '$.raidClear'), 0)
            WHERE cleared IS NULL;
    """

    def description(self) -> str:
        """Return migration description."""
        return "Add dps column to entity and backfill dps and cleared"
