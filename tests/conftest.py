"""
Pytest configuration and fixtures for mlsims tests.

This module provides:
- An autouse fixture that clears the mlsims environment variables
- Fixtures for a default Config and a FastAPI test client
"""

import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from mlsims.components.config import Config, ConfigManager


ENV_VARS = [
    'PORT', 'HOST', 'LOG_LEVEL', 'MLSIMS_SEED', 'KNN_K', 'KNN_METRIC',
    'KMEANS_MAX_ITERATIONS', 'KMEANS_CONVERGENCE_EPS', 'TREE_MAX_DEPTH',
    'REGRESSION_LEARNING_RATE', 'REGRESSION_ITERATIONS', 'REGRESSION_LAMBDAS',
    'NORMAL_MAX_SAMPLES', 'PERCEPTRON_MAX_ITERATIONS', 'LOGISTIC_ITERATIONS', 'CLT_MAX_SAMPLES',
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Run every test without mlsims settings from the outer environment."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    ConfigManager.reset()


@pytest.fixture
def config():
    """Fixture that returns a Config with default values and a fixed seed."""
    return Config({'random-seed': 42})


@pytest.fixture
def client(config):
    """Fixture that returns a test client for the API server."""
    from fastapi.testclient import TestClient
    from mlsims.components.server import Server

    return TestClient(Server(config).app)
