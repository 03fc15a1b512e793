"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach a real messaging gateway
os.environ.setdefault("WHATSAPP_API_URL", "")
os.environ.setdefault("WHATSAPP_API_KEY", "")
os.environ.setdefault("SMS_API_URL", "")
os.environ.setdefault("SMS_API_KEY", "")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///:memory:",
)
