"""Pytest configuration and shared fixtures."""

import pytest

# Load environment variables from .env file at test startup
# so FILE_AGENT_* settings are visible before fixtures are created
from dotenv import load_dotenv
load_dotenv()

pytest_plugins = [
    "tests.fixtures.agent",
    "tests.fixtures.audio",
    "tests.fixtures.hooks",
]


@pytest.fixture
def entries():
    """Build DirectoryEntry lists from ``(name, is_file)`` pairs under C:\\Data."""
    from agent_client.models import DirectoryEntry

    def build(*items: tuple[str, bool], directory: str = "C:\\Data") -> list[DirectoryEntry]:
        return [
            DirectoryEntry(name=name, path=f"{directory}\\{name}", is_file=is_file, size=100 if is_file else None)
            for name, is_file in items
        ]

    return build
