"""Pytest configuration for end-to-end tests.

Live tests hit the public AniList API and are skipped unless
``ANIMATCH_E2E_TESTS=1`` is set::

    ANIMATCH_E2E_TESTS=1 pytest tests/e2e/
"""

import os

import pytest


def pytest_collection_modifyitems(config, items):
    """Skip E2E tests unless explicitly enabled."""
    if os.environ.get("ANIMATCH_E2E_TESTS"):
        return
    skip_e2e = pytest.mark.skip(reason="E2E tests require ANIMATCH_E2E_TESTS=1")
    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip_e2e)
