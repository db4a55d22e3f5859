"""SQLite database connection and session management."""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session
from sqlalchemy.pool import NullPool

import config
from models import Base

# NullPool creates fresh connections each time, so Flask requests and
# background job threads never share a SQLite connection
engine = create_engine(
    config.DATABASE_URL,
    echo=config.FLASK_DEBUG,
    connect_args={"check_same_thread": False},
    poolclass=NullPool,
)

# Create session factory
SessionFactory = sessionmaker(bind=engine, autocommit=False, autoflush=False)

# Thread-local session
Session = scoped_session(SessionFactory)


def get_session():
    """Get a database session."""
    return Session()


def remove_session():
    """Remove the current thread-local session.

    This returns the connection to the pool and should be called
    after each request or operation completes.
    """
    Session.remove()


def init_db():
    """Initialize database tables."""
    Base.metadata.create_all(bind=engine)
    _seed_defaults()


def reset_db():
    """Drop and recreate all tables (used by tests)."""
    remove_session()
    Base.metadata.drop_all(bind=engine)
    init_db()


DEFAULT_RULES = [
    {
        "name": "Uber Receipts",
        "pattern": "Your Uber receipt",
        "fields": [
            {"name": "trip_date", "source": "html", "selector": ".trip-date", "process": "extract_text"},
            {"name": "amount", "source": "html", "selector": ".total-amount", "process": "extract_text"},
            {"name": "pickup_location", "source": "html", "selector": ".pickup-address", "process": "extract_text"},
            {"name": "dropoff_location", "source": "html", "selector": ".dropoff-address", "process": "extract_text"},
        ],
        "output_template": "uber_{trip_date}_{amount}.pdf",
        "required_fields": ["trip_date", "amount"],
    },
    {
        "name": "Uber Eats",
        "pattern": "Your Uber Eats order",
        "fields": [
            {"name": "order_date", "source": "html", "selector": ".order-date", "process": "extract_text"},
            {"name": "total_amount", "source": "html", "selector": ".total", "process": "extract_text"},
            {"name": "restaurant", "source": "html", "selector": ".restaurant-name", "process": "extract_text"},
            {"name": "delivery_address", "source": "html", "selector": ".delivery-address", "process": "extract_text"},
        ],
        "output_template": "ubereats_{order_date}_{total_amount}.pdf",
        "required_fields": ["order_date", "total_amount"],
    },
]


def _seed_defaults():
    """Seed the default receipt rules into an empty rule table."""
    from database.repositories.rule_repository import RuleRepository

    repo = RuleRepository()
    if repo.count_rules() > 0:
        return

    for rule in DEFAULT_RULES:
        repo.create_rule(**rule)
