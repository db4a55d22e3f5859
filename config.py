"""Global configuration for Mailsieve."""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Paths
BASE_DIR = Path(__file__).parent
DATA_DIR = Path(os.getenv("MAILSIEVE_DATA_DIR", BASE_DIR / "data"))
LOGS_DIR = DATA_DIR / "logs"
DOWNLOADS_DIR = DATA_DIR / "downloads"

# Ensure directories exist
DATA_DIR.mkdir(parents=True, exist_ok=True)
LOGS_DIR.mkdir(exist_ok=True)
DOWNLOADS_DIR.mkdir(exist_ok=True)

# Database
DATABASE_PATH = DATA_DIR / "mailsieve.db"
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATABASE_PATH}")

# Flask
FLASK_HOST = os.getenv("FLASK_HOST", "127.0.0.1")
FLASK_PORT = int(os.getenv("FLASK_PORT", "5160"))
FLASK_DEBUG = os.getenv("FLASK_DEBUG", "false").lower() == "true"
SECRET_KEY = os.getenv("SECRET_KEY", "mailsieve-dev-key-change-in-prod")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if FLASK_DEBUG else "INFO").upper()

# Processing defaults
MAX_EMAILS_PER_JOB = 50
DEFAULT_RESULTS_LIMIT = 20
DOCUMENT_EXTENSION = ".pdf"

# Subject keywords used to label services in exports and stats
SERVICE_KEYWORDS = [
    ("uber eats", "Uber Eats"),
    ("uber", "Uber"),
    ("instacart", "Instacart"),
]
