"""
History tables.

Defines table names and DDL statements for the append-only snapshot history.

Manifesto:
    The history is an event log, not a current-state table. Each row is one
    observation of one feature; a feature that changes gains a row, it never
    has a row rewritten. The only mutable columns are the two delivery flags,
    and they only ever flip from 0 to 1.

Architecture:
    ::

        ┌────────────────────────────────────────────────────────────┐
        │ compat_features                                            │
        │   PRIMARY KEY (name, observed_at)                          │
        │   spec_version, paper_name, paper_link                     │
        │   <vendor>_support, <vendor>_display_text,                 │
        │   <vendor>_extra_text   for vendor in gcc, clang, msvc     │
        │   delivered, delivery_failed_reported                      │
        └────────────────────────────────────────────────────────────┘

Examples:
    >>> from compat_spine.core.schema import TABLES
    >>> TABLES["features"]
    'compat_features'

Tags:
    schema, ddl, sqlite, compat-spine
"""

# =============================================================================
# TABLE NAMES
# =============================================================================

TABLES = {
    "features": "compat_features",
}


# =============================================================================
# DDL STATEMENTS
# =============================================================================

DDL = {
    "features": """
        CREATE TABLE IF NOT EXISTS compat_features (
            name TEXT NOT NULL,
            observed_at TEXT NOT NULL,
            spec_version INTEGER NOT NULL,
            paper_name TEXT,
            paper_link TEXT,
            gcc_support INTEGER NOT NULL,
            gcc_display_text TEXT,
            gcc_extra_text TEXT,
            clang_support INTEGER NOT NULL,
            clang_display_text TEXT,
            clang_extra_text TEXT,
            msvc_support INTEGER NOT NULL,
            msvc_display_text TEXT,
            msvc_extra_text TEXT,
            delivered INTEGER NOT NULL DEFAULT 0,
            delivery_failed_reported INTEGER NOT NULL DEFAULT 0,
            PRIMARY KEY (name, observed_at)
        )
    """,
    # Undelivered scan on every notification tick
    "features_pending_idx": """
        CREATE INDEX IF NOT EXISTS idx_compat_features_pending
        ON compat_features (delivered, delivery_failed_reported, observed_at)
    """,
}


def create_tables(conn) -> None:
    """
    Create the history tables.

    Safe to call multiple times (CREATE IF NOT EXISTS).
    """
    for _name, ddl in DDL.items():
        conn.execute(ddl)
    conn.commit()
