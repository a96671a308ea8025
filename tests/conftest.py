"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It pins APP_ENV to testing before settings are imported so no developer
.env file leaks into the run.
"""

import os

# Must happen before any import of crpt_client.core.config
os.environ["APP_ENV"] = "testing"

os.environ.setdefault("REGISTRY_BASE_URL", "https://registry.test")
os.environ.setdefault("RATE_LIMIT_REQUEST_LIMIT", "5")
os.environ.setdefault("RATE_LIMIT_WINDOW_SECONDS", "1.0")
