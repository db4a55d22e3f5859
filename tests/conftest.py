"""Pytest configuration and shared fixtures."""

import base64
import os
import sys
import tempfile
import pytest
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Keep the database, logs and rendered documents out of the project tree.
# Must happen before config is imported anywhere.
os.environ["MAILSIEVE_DATA_DIR"] = tempfile.mkdtemp(prefix="mailsieve-tests-")
os.environ.pop("DATABASE_URL", None)


# ============================================================================
# HTML Fixtures
# ============================================================================

@pytest.fixture
def uber_receipt_html():
    """Uber trip receipt body."""
    return """
    <html>
    <body>
        <div class="header"><h1>Thanks for riding</h1></div>
        <div class="trip-date">March 3, 2024</div>
        <div class="total-amount">$23.45</div>
        <div class="pickup-address">100 Main St</div>
        <div class="dropoff-address">200 Oak Ave</div>
    </body>
    </html>
    """


@pytest.fixture
def uber_eats_html():
    """Uber Eats order body with an itemized table."""
    return """
    <html>
    <body>
        <div class="order-date">Feb 14, 2024</div>
        <div class="restaurant-name">Pizza Palace</div>
        <div class="delivery-address">42 Elm Street</div>
        <table class="items">
            <tr class="item"><td class="qty">2</td><td class="name">Margherita</td><td class="price">$24.00</td></tr>
            <tr class="item"><td class="qty">1</td><td class="name">Garlic Bread</td><td class="price">$6.50</td></tr>
            <tr class="item"><td class="qty"></td><td class="name">Subtotal</td><td class="price">$30.50</td></tr>
        </table>
        <table class="summary">
            <tr><td class="label">Service Fee</td><td class="value">$2.00</td></tr>
            <tr><td class="label">Total</td><td class="value">$32.50</td></tr>
        </table>
        <div class="total">$32.50</div>
    </body>
    </html>
    """


@pytest.fixture
def ledger_html():
    """Line items whose "Total" row carries the grand total."""
    return """
    <html>
    <body>
        <ul class="lines">
            <li class="line"><span class="label">Fare</span><span class="value">$10.00</span></li>
            <li class="line"><span class="label">Tip</span><span class="value">$2.00</span></li>
            <li class="line"><span class="label">Total</span><span class="value"> $12.00 </span></li>
        </ul>
    </body>
    </html>
    """


@pytest.fixture
def empty_html():
    """Empty/minimal HTML."""
    return "<html><body></body></html>"


# ============================================================================
# Message Fixtures
# ============================================================================

def encode_body(html: str) -> str:
    """Encode HTML the way the Gmail API does (URL-safe, no padding)."""
    return base64.urlsafe_b64encode(html.encode("utf-8")).decode("ascii").rstrip("=")


@pytest.fixture
def make_message():
    """Factory for Gmail-API-shaped messages."""
    def _create(html=None, subject="Your Uber receipt", sender="Uber Receipts <noreply@uber.com>",
                date="Sun, 3 Mar 2024 10:00:00 +0000", message_id="msg-1", nested=False,
                extra_headers=None):
        headers = []
        if subject is not None:
            headers.append({"name": "Subject", "value": subject})
        if sender is not None:
            headers.append({"name": "From", "value": sender})
        if date is not None:
            headers.append({"name": "Date", "value": date})
        headers.extend(extra_headers or [])

        payload = {"mimeType": "multipart/alternative", "headers": headers}
        if html is not None:
            html_part = {"mimeType": "text/html", "body": {"data": encode_body(html)}}
            text_part = {"mimeType": "text/plain", "body": {"data": encode_body("plain text")}}
            if nested:
                payload["parts"] = [
                    text_part,
                    {"mimeType": "multipart/related", "parts": [html_part]},
                ]
            else:
                payload["parts"] = [text_part, html_part]

        return {"id": message_id, "payload": payload}

    return _create


# ============================================================================
# Rule Fixtures
# ============================================================================

@pytest.fixture
def uber_rule_data():
    """Rule JSON for Uber trip receipts."""
    return {
        "name": "Uber Receipts",
        "pattern": "Your Uber receipt",
        "fields": [
            {"name": "trip_date", "source": "html", "selector": ".trip-date", "process": "extract_text"},
            {"name": "amount", "source": "html", "selector": ".total-amount", "process": "extract_text"},
            {"name": "pickup_location", "source": "html", "selector": ".pickup-address"},
            {"name": "subject", "source": "header", "key": "Subject"},
        ],
        "output_template": "uber_{trip_date}_{amount}.pdf",
        "required_fields": ["trip_date", "amount"],
    }


@pytest.fixture
def eats_rule_data():
    """Rule JSON for Uber Eats orders with an item list and a lifted subtotal."""
    return {
        "name": "Uber Eats",
        "pattern": "Your Uber Eats order",
        "fields": [
            {"name": "order_date", "source": "html", "selector": ".order-date"},
            {"name": "restaurant", "source": "html", "selector": ".restaurant-name", "post_process": "upper()"},
            {
                "name": "items",
                "source": "html",
                "selector": "tr.item",
                "process": "extract_items",
                "subfields": [
                    {"name": "qty", "selector": ".qty"},
                    {"name": "name", "selector": ".name"},
                    {"name": "price", "selector": ".price"},
                ],
                "subfield_order": ["qty", "name", "price"],
                "special_values": [
                    {"subfield": "name", "value": "Subtotal", "extract_subfield": "price",
                     "name": "subtotal", "post_process": "replace('\\$','')"},
                ],
            },
            {"name": "total_amount", "source": "html", "selector": "tr:contains('Total') td.value"},
        ],
        "output_template": "ubereats_{order_date}_{total_amount}.pdf",
        "required_fields": ["order_date", "total_amount"],
    }


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
def db():
    """Fresh schema with the default rules seeded."""
    from database.connection import reset_db, remove_session

    reset_db()
    yield
    remove_session()
