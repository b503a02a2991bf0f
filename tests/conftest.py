"""
Shared fixtures.
"""

import os

import pytest

_SETTINGS_PREFIXES = ("WASCRIPT_", "WA_DISPATCH_")


@pytest.fixture(autouse=True)
def isolated_environ(monkeypatch):
    """Hide the developer's Wascript settings and discard anything .env loads."""
    for key in list(os.environ):
        if key.startswith(_SETTINGS_PREFIXES):
            monkeypatch.delenv(key)
    yield
    # load_dotenv writes straight to os.environ; drop those before
    # monkeypatch restores the hidden originals.
    for key in list(os.environ):
        if key.startswith(_SETTINGS_PREFIXES):
            del os.environ[key]
