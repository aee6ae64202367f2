"""Migration #12: Add full text search over encounter previews."""

from .base import Migration


class Migration012AddEncounterSearch(Migration):
    """Migration #12: Add full text search over encounter previews.

    ``encounter_search`` is an external-content FTS5 index on
    ``encounter_preview``, kept in sync by triggers. FTS5 stores the index
    in shadow tables such as ``encounter_search_data``.

    The trigram tokenizer is used without ``remove_diacritics 1``, which
    needs SQLite 3.45. Accented and unaccented spellings therefore do not
    match each other.
    """

    version = 12

    sql = """
        CREATE VIRTUAL TABLE encounter_search USING fts5(
            current_boss, players, columnsize=0, detail=full,
            tokenize='trigram',
            content=encounter_preview, content_rowid=id
        );
        INSERT INTO encounter_search(encounter_search) VALUES('rebuild');

        CREATE TRIGGER encounter_preview_ai AFTER INSERT ON encounter_preview BEGIN
            INSERT INTO encounter_search(rowid, current_boss, players)
            VALUES (new.id, new.current_boss, new.players);
        END;

        CREATE TRIGGER encounter_preview_ad AFTER DELETE ON encounter_preview BEGIN
            INSERT INTO encounter_search(encounter_search, rowid, current_boss, players)
            VALUES ('delete', old.id, old.current_boss, old.players);
        END;

        CREATE TRIGGER encounter_preview_au AFTER UPDATE OF current_boss, players ON encounter_preview BEGIN
            INSERT INTO encounter_search(encounter_search, rowid, current_boss, players)
            VALUES ('delete', old.id, old.current_boss, old.players);
            INSERT INTO encounter_search(rowid, current_boss, players)
            VALUES (new.id, new.current_boss, new.players);
        END;
    """

    def description(self) -> str:
        """Return migration description."""
        return "Add full text search"
