"""Mailsieve - receipt extraction server entry point."""

from api import create_app
from database.connection import init_db
import config


def main():
    """Initialize the database and serve the API."""
    print("Initializing Mailsieve...")

    init_db()
    print("Database initialized")

    app = create_app()
    print("Flask app created")

    print(f"\n{'=' * 50}")
    print(f"  Mailsieve running at: http://{config.FLASK_HOST}:{config.FLASK_PORT}")
    print(f"{'=' * 50}\n")

    app.run(
        host=config.FLASK_HOST,
        port=config.FLASK_PORT,
        debug=config.FLASK_DEBUG,
        use_reloader=False,
        threaded=True,
    )


if __name__ == "__main__":
    main()
