"""Shared test fixtures for Habitify tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
import yaml


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with settings and a few habits."""
    root = tmp_path / "workspace"
    root.mkdir(parents=True)

    # Settings
    settings = {"timezone": "UTC", "log_level": "DEBUG"}
    (root / "settings.yaml").write_text(
        yaml.dump(settings, default_flow_style=False), encoding="utf-8"
    )

    # Habits
    habits = {
        "habits": [
            {
                "id": "read",
                "name": "Read",
                "color": "#3498DB",
                "icon": "book.fill",
                "created_at": "2025-06-01T08:00:00",
                "schedule": {"frequency": "daily"},
                "completions": ["2025-06-10", "2025-06-11", "2025-06-12"],
                "revision": 3,
            },
            {
                "id": "gym",
                "name": "Gym",
                "color": "#E74C3C",
                "icon": "figure.run",
                "created_at": "2025-06-01T08:00:00",
                # Mon, Wed, Fri
                "schedule": {"frequency": "weekly", "weekdays": [2, 4, 6]},
                "completions": ["2025-06-09", "2025-06-11", "2025-06-13"],
                "revision": 3,
            },
            {
                "id": "rent",
                "name": "Pay rent",
                "color": "#2ECC71",
                "icon": "banknote",
                "created_at": "2025-05-20T08:00:00",
                "schedule": {"frequency": "monthly", "days_of_month": [1, 15]},
                "completions": ["2025-05-15", "2025-06-01"],
                "revision": 2,
            },
        ]
    }
    (root / "habits.yaml").write_text(
        yaml.dump(habits, default_flow_style=False, sort_keys=False), encoding="utf-8"
    )

    # Set env var
    os.environ["HABITIFY_ROOT"] = str(root)
    yield root
    # Cleanup
    if "HABITIFY_ROOT" in os.environ:
        del os.environ["HABITIFY_ROOT"]
