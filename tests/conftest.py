"""Root conftest - shared test configuration."""

import os

# Ensure tests don't accidentally use real API keys or a real identity graph
os.environ.setdefault("ANTHROPIC_API_KEY", "sk-ant-test-fake-key")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("IDENTITY_GRAPH_BASE_URL", "http://identity-graph.test")
