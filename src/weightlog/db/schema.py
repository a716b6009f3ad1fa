"""SQLite database schema definitions."""

SCHEMA_SQL = """
-- User profiles (weights in kg)
CREATE TABLE IF NOT EXISTS users (
    user_id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    height_cm REAL,
    goal_weight_kg REAL,
    starting_weight_kg REAL,
    preferred_unit TEXT NOT NULL DEFAULT 'kg' CHECK(preferred_unit IN ('kg', 'lb')),
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Weight samples, always stored in kg. trend is derived at write time.
CREATE TABLE IF NOT EXISTS weight_log (
    log_id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    measured_at DATE NOT NULL,
    time_of_day TEXT NOT NULL DEFAULT '00:00:00',
    weight_kg REAL NOT NULL,
    trend TEXT NOT NULL DEFAULT 'stable' CHECK(trend IN ('rising', 'falling', 'stable')),
    note TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (user_id) REFERENCES users(user_id)
);

CREATE INDEX IF NOT EXISTS idx_weight_log_user_date ON weight_log(user_id, measured_at, time_of_day);
"""


def get_schema_sql() -> str:
    """Return the complete schema SQL."""
    return SCHEMA_SQL
