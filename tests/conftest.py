"""
Global pytest configuration for all tests.

Provides shared fixtures to prevent test isolation issues.
"""

import os
import pytest

@pytest.fixture(scope="function", autouse=True)
def aws_credentials(monkeypatch):
    """
    Set mock AWS credentials for all tests.

    This prevents boto3 from looking for real credentials and ensures
    consistent environment across all test modules.
    """
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_SECURITY_TOKEN', 'testing')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'eu-west-1')
    monkeypatch.setenv('AWS_REGION', 'eu-west-1')
    monkeypatch.delenv('DRY_RUN', raising=False)
    monkeypatch.delenv('INSTANCE_TERMINATOR_CONFIG_PARAM', raising=False)
    yield
