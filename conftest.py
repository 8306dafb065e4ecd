# Ensure tests import the package from this checkout first, even when an
# installed copy of readonly_proxy is also on the path.
import os
import sys

import pytest

SERVICE_ROOT = os.path.dirname(__file__)

if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)

from readonly_proxy.models import Notice  # noqa: E402
from readonly_proxy.utils_tests.upstream_mock import RecordingUpstream  # noqa: E402


@pytest.fixture
def notice():
    return Notice(
        text="This is a readonly proxy for testing.",
        readme="https://example.com/readme",
        authors="test-authors",
    )


@pytest.fixture
def upstream():
    """Upstream answering {"clientApiKey": "abc"} and recording each request."""
    return RecordingUpstream()
