"""
Pytest configuration and fixtures for cloudflared operator tests
"""

from unittest.mock import MagicMock

import pytest

from tests.utils import FakeAppsApi, make_body


@pytest.fixture
def body():
    """A CloudflaredDeployment with an empty spec."""
    return make_body()


@pytest.fixture
def custom_template():
    """A pod template override with one non-default container."""
    return {
        "metadata": {"labels": {"app": "cloudflared"}},
        "spec": {
            "containers": [
                {"name": "container-name", "image": "something/not/cloudflared"},
            ],
        },
    }


@pytest.fixture
def apps_api():
    return FakeAppsApi()


@pytest.fixture
def custom_api(body):
    """CustomObjectsApi mock that serves the ``body`` fixture."""
    api = MagicMock()
    api.get_namespaced_custom_object.return_value = body
    return api


@pytest.fixture
def logger():
    return MagicMock()
