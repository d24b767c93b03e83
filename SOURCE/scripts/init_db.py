"""
Initialize the database schema for the notetaker API.

Usage:
    python SOURCE/scripts/init_db.py
"""

from notetaker_api.app import create_app
from notetaker_api.database import get_engine


def main() -> None:
    create_app()
    engine = get_engine()
    print(f"Database initialized at {engine.url.render_as_string(hide_password=True)}")


if __name__ == "__main__":
    main()
