"""Migration #1: Create the encounter and entity tables."""

from .base import Migration


class Migration001CreateEncounterTables(Migration):
    """Migration #1: Create the encounter and entity tables.

    This is the schema shipped before version tracking existed. One
    encounter row is written per fight; each participant (player, boss,
    summon) becomes an entity row keyed by (name, encounter_id).
    """

    version = 1

    sql = """
        CREATE TABLE encounter (
            id INTEGER PRIMARY KEY,
            last_combat_packet INTEGER,
            fight_start INTEGER,
            local_player TEXT,
            current_boss TEXT,
            duration INTEGER,
            total_damage_dealt INTEGER,
            top_damage_dealt INTEGER,
            total_damage_taken INTEGER,
            top_damage_taken INTEGER,
            dps INTEGER,
            buffs TEXT,
            debuffs TEXT
        );

        CREATE TABLE entity (
            name TEXT,
            encounter_id INTEGER NOT NULL,
            npc_id INTEGER,
            entity_type TEXT,
            class_id INTEGER,
            class TEXT,
            gear_score REAL,
            current_hp INTEGER,
            max_hp INTEGER,
            is_dead INTEGER,
            skills TEXT,
            damage_stats TEXT,
            skill_stats TEXT,
            last_update INTEGER,
            PRIMARY KEY (name, encounter_id),
            FOREIGN KEY (encounter_id) REFERENCES encounter (id) ON DELETE CASCADE
        );

        CREATE INDEX encounter_fight_start_index ON encounter (fight_start DESC);
        CREATE INDEX encounter_current_boss_index ON encounter (current_boss);
        CREATE INDEX entity_encounter_id_index ON entity (encounter_id DESC);
        CREATE INDEX entity_name_index ON entity (name);
        CREATE INDEX entity_class_index ON entity (class);
    """

    def description(self) -> str:
        """Return migration description."""
        return "Create encounter and entity tables"
