"""
Shared pytest fixtures and configuration.
"""

import json

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from enforcer.api.app import create_app

SEED_POLICIES = [
    {
        "metadata": {"name": "dev-idle"},
        "spec": {
            "scope": {"namespaces": {"include": ["dev-*"], "exclude": ["dev-keep"]}},
            "conditions": {"idleWindow": "24h", "minHourlyCost": 1.0},
            "actions": {"type": "scaleToZero", "notify": "slack", "reactivationAllowed": True},
            "enforcement": {"dryRun": False, "maxActionsPerRun": 2},
        },
    },
]


@pytest.fixture()
def policy_file(tmp_path):
    path = tmp_path / "policies.json"
    path.write_text(json.dumps(SEED_POLICIES))
    return path


@pytest.fixture()
def app(policy_file):
    """Create a fresh app instance per test, seeded with SEED_POLICIES."""
    return create_app(policy_file=policy_file)


@pytest_asyncio.fixture()
async def client(app):
    """Async HTTP client wired directly to the ASGI app (no server needed)."""
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
