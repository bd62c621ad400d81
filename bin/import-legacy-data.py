"""Import games, player profiles and sessions written by the file-based server.

Usage: python bin/import-legacy-data.py <legacy_data_dir>

The target database comes from SPADES_DATABASE_PATH (see SpadesServerSettings).
Tables that already hold rows are left untouched.
"""

import sys
from pathlib import Path

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "backend"))

from shared.db import Database
from spades.server.settings import SpadesServerSettings


def main() -> None:
    if len(sys.argv) != 2:
        print(f"Usage: {sys.argv[0]} <legacy_data_dir>")
        sys.exit(1)

    legacy_dir = Path(sys.argv[1])
    if not legacy_dir.is_dir():
        print(f"Error: {legacy_dir} is not a directory")
        sys.exit(1)

    settings = SpadesServerSettings()
    db = Database(settings.database_path)
    db.connect()
    try:
        try:
            counts = db.import_legacy_json(legacy_dir)
        except OSError as e:
            print(f"Error: {e}")
            sys.exit(1)

        print(f"Imported into {settings.database_path}:")
        for table, count in counts.items():
            print(f"  {table}: {count}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
