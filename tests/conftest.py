"""
Shared fixtures for the formguard test suite.
"""

import os

import pytest

from formguard.core.config import Config, reset_config


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Every test starts from the built-in defaults, whatever the environment."""
    for key in list(os.environ):
        if key.startswith("FORMGUARD_"):
            monkeypatch.delenv(key)
    config = reset_config(Config(environ={}))
    yield config
    reset_config(Config(environ={}))


@pytest.fixture
def contact_record():
    """A valid contact form submission."""
    return {
        "name": "Ann",
        "surname": "Lee",
        "email": "ann@example.com",
        "phone": "(555) 123-4567",
        "message": "Hello there",
        "honeypot": "",
    }


@pytest.fixture
def field_messages():
    return {
        "name": {"required": "Name is required"},
        "email": {"required": "Email is required", "email": "Email is invalid"},
        "honeypot": {"invalid": "You're not a human, are you?"},
    }
