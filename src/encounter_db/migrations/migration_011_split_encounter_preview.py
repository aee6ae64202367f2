"""Migration #11: Move encounter preview info into a separate table."""

from .base import Migration


class Migration011SplitEncounterPreview(Migration):
    """Migration #11: Move encounter preview info into a separate table.

    The encounter list only needs a handful of columns, but reading them
    from ``encounter`` pulled the large JSON columns into every page load.
    This migration:

    - creates ``encounter_preview`` keyed by the encounter id
    - copies the preview columns, a ``class_id:name`` player list ordered
      by dps, and the local player's dps into it
    - drops the old encounter indexes and columns that moved
    - indexes the preview table on the columns the list sorts by

    ``difficulty``, ``favorite``, ``cleared`` and ``boss_only_damage`` no
    longer exist on ``encounter`` after this step.

    The player list is built by GROUP_CONCAT over a subquery ordered by dps,
    since GROUP_CONCAT(... ORDER BY ...) needs SQLite 3.44. ``favorite`` is
    copied as ``coalesce(favorite, 0)`` because the preview column is
    NOT NULL; migration 4 already defaults it to 0, so existing rows copy
    unchanged.
    """

    version = 11

    sql = """
        CREATE TABLE encounter_preview (
            id INTEGER PRIMARY KEY,
            fight_start INTEGER,
            current_boss TEXT,
            duration INTEGER,
            players TEXT,
            difficulty TEXT,
            local_player TEXT,
            my_dps INTEGER,
            favorite BOOLEAN NOT NULL DEFAULT 0,
            cleared BOOLEAN,
            boss_only_damage BOOLEAN NOT NULL DEFAULT 0,
            FOREIGN KEY (id) REFERENCES encounter (id) ON DELETE CASCADE
        );

        INSERT INTO encounter_preview SELECT
            id, fight_start, current_boss, duration,
            (
                SELECT GROUP_CONCAT(player)
                FROM (
                    SELECT class_id || ':' || name AS player
                    FROM entity
                    WHERE encounter_id = encounter.id AND entity_type = 'PLAYER'
                    ORDER BY dps DESC
                )
            ) AS players,
            difficulty, local_player,
            (
                SELECT dps
                FROM entity
                WHERE encounter_id = encounter.id AND name = encounter.local_player
            ) AS my_dps,
            coalesce(favorite, 0), cleared, boss_only_damage
        FROM encounter;

        DROP INDEX IF EXISTS encounter_fight_start_index;
        DROP INDEX IF EXISTS encounter_current_boss_index;
        DROP INDEX IF EXISTS encounter_favorite_index;
        DROP INDEX IF EXISTS entity_name_index;
        DROP INDEX IF EXISTS entity_class_index;

        ALTER TABLE encounter DROP COLUMN fight_start;
        ALTER TABLE encounter DROP COLUMN current_boss;
        ALTER TABLE encounter DROP COLUMN duration;
        ALTER TABLE encounter DROP COLUMN difficulty;
        ALTER TABLE encounter DROP COLUMN local_player;
        ALTER TABLE encounter DROP COLUMN favorite;
        ALTER TABLE encounter DROP COLUMN cleared;
        ALTER TABLE encounter DROP COLUMN boss_only_damage;

        CREATE INDEX encounter_preview_favorite_index ON encounter_preview (favorite);
        CREATE INDEX encounter_preview_fight_start_index ON encounter_preview (fight_start);
        CREATE INDEX encounter_preview_my_dps_index ON encounter_preview (my_dps);
        CREATE INDEX encounter_preview_duration_index ON encounter_preview (duration);
    """

    def description(self) -> str:
        """Return migration description."""
        return "Move encounter preview info into a separate table"
