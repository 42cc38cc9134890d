"""Shared fixtures: a small policy index and sprint documents."""

import copy
import json

import pytest

from steward.lib.sprint_file import sprint_from_dict
from steward.policy.index import build_policy_index

INDEX_DATA = {
    "version": "2.3",
    "keywords": {
        "validation": {
            "description": "Input validation rules",
            "policies": ["4.1", "5.9", "17.1"],
        },
        "errors": ["9.3", "3.6"],
        "data": ["3.6", "1.2", "2.4"],
        "secure": ["2.4", "4.1"],
        "Logging ": ["9.3"],
    },
    "scenarios": {
        "new api endpoint": ["5.9", "4.1", "3.6"],
    },
    "technologies": {
        "nextjs": ["4.1", "9.3"],
        "postgres": ["1.2"],
    },
    "categories": {
        "code-quality": ["3.6", "9.3"],
        "testing": ["8.1"],
        "api": ["5.9"],
        "frontend": ["17.1"],
        "security": ["4.1", "2.4"],
        "database": ["1.2"],
    },
    "policy_details": {
        "1.2": {"title": "No SELECT * in queries", "level": "MUST", "category": "database"},
        "2.4": {"title": "Secrets never in source", "level": "MUST", "category": "security"},
        "3.6": {"title": "Handle errors explicitly", "level": "MUST", "category": "code-quality"},
        "4.1": {"title": "Server-side input validation", "level": "MUST", "category": "security"},
        "5.9": {"title": "Validate request schemas", "level": "SHOULD", "category": "api"},
        "8.1": {"title": "Unit tests for new logic", "level": "MUST", "category": "testing"},
        "9.3": {"title": "Structured logging", "level": "should", "category": "code-quality"},
        "17.1": {"title": "Inline form validation", "level": "MAY", "category": "frontend"},
    },
}

SPRINT_DATA = {
    "sprint_id": "checkout-v2",
    "goal": "Rework checkout payment flow",
    "status": "in_progress",
    "scope": {
        "in_scope": ["app/checkout/**"],
        "off_limits": ["app/auth/**"],
    },
    "tasks": [
        {
            "id": "1",
            "title": "Payment form",
            "status": "completed",
            "files_modified": ["app/checkout/pay.ts"],
        },
        {
            "id": "2",
            "title": "Receipt page",
            "status": "in_progress",
            "files_modified": ["app/checkout/receipt.ts", "app/checkout/pay.ts"],
        },
    ],
    "regression_baseline": {
        "tests_passed": 45,
        "tests_failed": 0,
        "tests_total": 45,
        "timestamp": "2026-10-01T09:00:00+00:00",
    },
    "decisions": [
        {"what": "Use Stripe elements", "why": "PCI scope", "timestamp": "2026-10-01T09:30:00+00:00"},
    ],
    "blockers": [],
}


@pytest.fixture
def index_data():
    return copy.deepcopy(INDEX_DATA)


@pytest.fixture
def index(index_data):
    return build_policy_index(index_data)


@pytest.fixture
def sprint_data():
    return copy.deepcopy(SPRINT_DATA)


@pytest.fixture
def sprint(sprint_data):
    return sprint_from_dict(sprint_data)


@pytest.fixture
def index_file(tmp_path, index_data):
    path = tmp_path / "policy-index.json"
    path.write_text(json.dumps(index_data))
    return path


@pytest.fixture
def sprint_file(tmp_path, sprint_data):
    path = tmp_path / "sprint.json"
    path.write_text(json.dumps(sprint_data))
    return path
