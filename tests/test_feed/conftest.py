"""Shared fixtures for feed tests."""

import pytest


@pytest.fixture
def feedback_row():
    """One joined row as returned by the feed query."""
    return {
        "id": "5d7f1c2e-0000-4000-8000-000000000001",
        "user_id": "user-ana",
        "title": "Festa ótima",
        "content": "Gostei muito",
        "category": "geral",
        "created_at": "2026-03-02T12:00:00.123456+00:00",
        "profiles": {"full_name": "Ana Silva", "class": "9A"},
        "comments": [
            {
                "id": "c-1",
                "content": "Concordo!",
                "created_at": "2026-03-02T12:05:00Z",
                "profiles": {"full_name": "Bruno Costa", "class": "2B"},
            },
        ],
    }
