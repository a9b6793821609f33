"""Pytest configuration and shared fixtures for Global Defense Index tests.

This module provides fixtures for:
- Environment configuration
- Mock AWS S3 services using moto
- In-memory and DuckDB document backends
- Sample nations, aircraft and stat definitions
- Mock generative producers
"""

import tempfile
from pathlib import Path
from typing import Dict, Generator, List
from unittest.mock import MagicMock

import boto3
import pytest
from moto import mock_aws

from defense_index.auth import AuthState
from defense_index.coordinator import DomainCoordinator
from defense_index.defaults import default_document
from defense_index.models import AIRCRAFT, NATIONS, Entity, NationProfile, StatDefinition, StatFormat
from defense_index.schema_registry import SchemaRegistry
from defense_index.sync.backends import InMemoryDocumentBackend
from defense_index.sync.channel import SyncChannel


# ============================================================================
# Environment and Configuration Fixtures
# ============================================================================

@pytest.fixture(scope="session")
def test_env_vars() -> Dict[str, str]:
    """Provide test environment variables.

    Returns:
        Dictionary of environment variables for testing
    """
    return {
        "TARGET": "dev",
        "USERNAME": "testuser",
        "STORAGE_BACKEND": "memory",
        "S3_BUCKET_NAME": "test-global-defense-index",
        "AWS_ACCESS_KEY_ID": "testing",
        "AWS_SECRET_ACCESS_KEY": "testing",
        "AWS_SECURITY_TOKEN": "testing",
        "AWS_SESSION_TOKEN": "testing",
        "AWS_DEFAULT_REGION": "us-east-1",
    }


@pytest.fixture(scope="function")
def mock_env(test_env_vars: Dict[str, str], monkeypatch) -> None:
    """Mock environment variables for testing."""
    for key, value in test_env_vars.items():
        monkeypatch.setenv(key, value)


# ============================================================================
# AWS S3 Mocking Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def aws_credentials(test_env_vars: Dict[str, str], monkeypatch):
    """Mock AWS credentials for moto."""
    for key, value in test_env_vars.items():
        if key.startswith("AWS_"):
            monkeypatch.setenv(key, value)


@pytest.fixture(scope="function")
def s3_mock(aws_credentials):
    """Provide mocked S3 service using moto."""
    with mock_aws():
        yield


@pytest.fixture(scope="function")
def s3_client(s3_mock, test_env_vars: Dict[str, str]):
    """Provide mocked S3 client."""
    return boto3.client("s3", region_name=test_env_vars["AWS_DEFAULT_REGION"])


@pytest.fixture(scope="function")
def s3_bucket(s3_client, test_env_vars: Dict[str, str]) -> str:
    """Create a test S3 bucket and return its name."""
    bucket_name = test_env_vars["S3_BUCKET_NAME"]
    s3_client.create_bucket(Bucket=bucket_name)
    return bucket_name


# ============================================================================
# Temporary File Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ============================================================================
# Sample Data Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def nation_stats() -> List[StatDefinition]:
    return [
        StatDefinition("activePersonnel", "Active Personnel", "Logistics", StatFormat.NUMBER),
        StatDefinition("tanks", "Tanks", "Land", StatFormat.NUMBER),
        StatDefinition("cyberCap", "Cyber Warfare", "Cyber", StatFormat.SLIDER),
    ]


@pytest.fixture(scope="function")
def nation_registry(nation_stats) -> SchemaRegistry:
    return SchemaRegistry(nation_stats, ["Logistics", "Land", "Cyber"])


def make_nation(entity_id: str, name: str, score: float, **stats) -> Entity:
    """Build a nation entity for tests."""
    return Entity(
        id=entity_id,
        name=name,
        score=score,
        profile=NationProfile(flag_code=entity_id[:2]),
        stats=dict(stats),
    )


@pytest.fixture(scope="function")
def sample_nations() -> List[Entity]:
    return [
        make_nation("usa", "United States", 98.5, activePersonnel=1390000, tanks=5500, cyberCap=9.75),
        make_nation("rus", "Russia", 94.2, activePersonnel=1150000, tanks=12566, cyberCap=8.5),
    ]


@pytest.fixture(scope="function")
def small_document(nation_registry, sample_nations) -> Dict:
    """A shared document with two nations and the default aircraft data."""
    document = default_document()
    document["countries"] = [entity.to_dict() for entity in sample_nations]
    document["statDefinitions"] = nation_registry.definitions_to_list()
    document["categories"] = nation_registry.categories
    return document


# ============================================================================
# Synchronization Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def memory_backend() -> InMemoryDocumentBackend:
    """Backend with no document yet."""
    return InMemoryDocumentBackend()


@pytest.fixture(scope="function")
def seeded_backend(small_document) -> InMemoryDocumentBackend:
    return InMemoryDocumentBackend(small_document)


@pytest.fixture(scope="function")
def channel(seeded_backend) -> Generator[SyncChannel, None, None]:
    channel = SyncChannel(seeded_backend)
    yield channel
    channel.close()


@pytest.fixture(scope="function")
def admin_auth() -> AuthState:
    return AuthState(current_user="admin@example.com")


@pytest.fixture(scope="function")
def mock_producer():
    """Producer returning whatever the test assigns to ``produce.return_value``."""
    producer = MagicMock()
    producer.produce.return_value = None
    producer.analyze.return_value = None
    return producer


@pytest.fixture(scope="function")
def nations(channel, admin_auth, mock_producer) -> Generator[DomainCoordinator, None, None]:
    coordinator = DomainCoordinator(NATIONS, channel, admin_auth, mock_producer)
    coordinator.start()
    yield coordinator
    coordinator.dispose()


@pytest.fixture(scope="function")
def aircraft(channel, admin_auth) -> Generator[DomainCoordinator, None, None]:
    coordinator = DomainCoordinator(AIRCRAFT, channel, admin_auth)
    coordinator.start()
    yield coordinator
    coordinator.dispose()
