"""Full-text shadow table and the triggers that keep it in sync with notes."""

from sqlalchemy import DDL, text

SEARCH_TABLE = "notes_fts"
TRIGGER_NAMES = ("fts_insert", "fts_update", "fts_delete")

# FTS5 virtual table mirroring title, filename and body of the notes table
CREATE_SEARCH_INDEX = DDL(f"""
CREATE VIRTUAL TABLE IF NOT EXISTS {SEARCH_TABLE} USING fts5(
    id UNINDEXED,
    title,
    filename,
    full_text,
    tokenize='unicode61',
    prefix='2 3'
);
""")

# Copy rows that existed before the shadow table did
BACKFILL_SEARCH_INDEX = text(f"""
INSERT INTO {SEARCH_TABLE} (id, title, filename, full_text)
SELECT id, COALESCE(title, ''), COALESCE(filename, ''), COALESCE(body, '')
FROM notes
""")

DROP_TRIGGERS = [DDL(f"DROP TRIGGER IF EXISTS {name}") for name in TRIGGER_NAMES]

CREATE_TRIGGERS = [
    DDL(f"""
CREATE TRIGGER fts_insert AFTER INSERT ON notes BEGIN
    INSERT INTO {SEARCH_TABLE} (id, title, filename, full_text)
    VALUES (new.id, COALESCE(new.title, ''), COALESCE(new.filename, ''), COALESCE(new.body, ''));
END
"""),
    DDL(f"""
CREATE TRIGGER fts_update AFTER UPDATE ON notes BEGIN
    UPDATE {SEARCH_TABLE}
    SET id = new.id,
        title = COALESCE(new.title, ''),
        filename = COALESCE(new.filename, ''),
        full_text = COALESCE(new.body, '')
    WHERE id = old.id;
END
"""),
    DDL(f"""
CREATE TRIGGER fts_delete AFTER DELETE ON notes BEGIN
    DELETE FROM {SEARCH_TABLE} WHERE id = old.id;
END
"""),
]
