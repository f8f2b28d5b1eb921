"""
Shared pytest fixtures and configuration for keypage tests.

This module provides common fixtures used across unit and integration tests,
including in-memory stores seeded with sample maps, mocked boto3 clients and
LocalStack clients.
"""

import os
from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import boto3
import pytest

from keypage import Composite, Map, MemoryStorage, Str, Uint

if TYPE_CHECKING:
    from helpers.localstack import LocalStackHelper


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line("markers", "integration: Integration tests against LocalStack")


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless a LocalStack endpoint is configured."""
    if os.getenv("LOCALSTACK_ENDPOINT"):
        return
    skip_integration = pytest.mark.skip(reason="LOCALSTACK_ENDPOINT not set")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture
def storage() -> MemoryStorage:
    """A fresh, empty in-memory store."""
    return MemoryStorage()


@pytest.fixture
def flat_map() -> Map:
    """A map keyed by u8 integers holding strings."""
    return Map("test_map", Uint(8), str)


@pytest.fixture
def prefixed_map() -> Map:
    """A map keyed by (u8, u8) tuples holding strings."""
    return Map("test_map", Composite(Uint(8), Uint(8)), str)


@pytest.fixture
def seeded_flat(storage, flat_map) -> MemoryStorage:
    """Store holding 100 sequential keys 0..99 with values 'string-{i}'."""
    for i in range(100):
        flat_map.save(storage, i, f"string-{i}")
    return storage


@pytest.fixture
def seeded_prefixed(storage, prefixed_map) -> MemoryStorage:
    """
    Store holding 100 suffixes 0..99 under prefix 1, plus neighbours
    under prefixes 0 and 2 that must never leak into a prefix-1 page.
    """
    for i in range(100):
        prefixed_map.save(storage, (1, i), f"string-{i}")
    for i in range(5):
        prefixed_map.save(storage, (0, i), f"before-{i}")
        prefixed_map.save(storage, (2, i), f"after-{i}")
    return storage


@pytest.fixture
def named_map() -> Map:
    """A map keyed by strings holding integers."""
    return Map("test_map", Str(), int)


@pytest.fixture
def mock_client():
    """
    Creates a fully mocked boto3 DynamoDB client.

    This fixture provides a mock client for unit tests that don't need
    real DynamoDB interactions.
    """
    client = MagicMock()
    client.get_paginator.return_value = MagicMock()
    return client


# Integration Test Fixtures


@pytest.fixture(scope="session")
def localstack_endpoint() -> str:
    """Get LocalStack endpoint URL from environment or default."""
    return os.getenv("LOCALSTACK_ENDPOINT", "http://localhost:4566")


@pytest.fixture(scope="session")
def localstack_client(localstack_endpoint: str):
    """
    Creates a boto3 client connected to LocalStack.

    This fixture is session-scoped to avoid creating multiple clients.
    """
    return boto3.client(
        "dynamodb",
        endpoint_url=localstack_endpoint,
        region_name="eu-south-1",
        aws_access_key_id="test",
        aws_secret_access_key="test",
    )


@pytest.fixture(scope="session")
def localstack_helper(localstack_endpoint: str) -> "LocalStackHelper":
    """Provides a LocalStackHelper instance for integration tests."""
    from helpers.localstack import LocalStackHelper

    return LocalStackHelper(endpoint_url=localstack_endpoint)
