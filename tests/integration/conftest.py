# tests/integration/conftest.py - v2
"""Container fixtures for integration tests (testcontainers).

Redis and Qdrant start once per session; each test gets its own Qdrant
collection and Redis key prefix so tests never see each other's entries.

Containers are reached through their bridge-network IP and internal port
rather than localhost:mapped_port, which also works from a devcontainer
talking to the host Docker daemon through a mounted socket.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import NamedTuple

import pytest

logger = logging.getLogger(__name__)

QDRANT_IMAGE = "qdrant/qdrant:v1.16"
QDRANT_HTTP_PORT = 6333
REDIS_IMAGE = "redis:7-alpine"
REDIS_PORT = 6379


def pytest_configure(config):
    config.addinivalue_line("markers", "qdrant: marks tests requiring Qdrant container")
    config.addinivalue_line("markers", "redis: marks tests requiring Redis container")


class Endpoint(NamedTuple):
    host: str
    port: int


def _docker_available() -> bool:
    try:
        import docker

        docker.from_env().ping()
    except Exception:
        return False
    return True


def _bridge_ip(container, attempts: int = 10) -> str:
    """Poll the Docker API until the container reports a network IP."""
    wrapped = container.get_wrapped_container()
    for attempt in range(1, attempts + 1):
        try:
            wrapped.reload()
        except Exception as e:
            logger.debug("Container reload failed (attempt %d): %s", attempt, e)
        else:
            networks = wrapped.attrs.get("NetworkSettings", {}).get("Networks", {})
            ips = [net.get("IPAddress") for net in networks.values() if net.get("IPAddress")]
            if ips:
                return ips[0]
        time.sleep(0.5)
    raise RuntimeError(f"No bridge IP for container {wrapped.short_id} after {attempts} attempts")


def _start(image: str, port: int, ready_log: str, timeout: float, settle: float = 0.0):
    """Start a container, wait for its ready line and return (container, endpoint)."""
    if not _docker_available():
        pytest.skip("Docker not available")

    from testcontainers.core.container import DockerContainer
    from testcontainers.core.waiting_utils import wait_for_logs

    container = DockerContainer(image).with_exposed_ports(port)
    container.start()
    wait_for_logs(container, predicate=ready_log, timeout=timeout)
    if settle:
        time.sleep(settle)
    endpoint = Endpoint(_bridge_ip(container), port)
    logger.info("%s ready at %s:%d", image, endpoint.host, endpoint.port)
    return container, endpoint


@pytest.fixture(scope="session")
def qdrant_container():
    # Qdrant logs the Actix line slightly before the HTTP API answers.
    container, endpoint = _start(QDRANT_IMAGE, QDRANT_HTTP_PORT, r"Actix runtime", 60, settle=1.0)
    yield endpoint
    container.stop()


@pytest.fixture(scope="session")
def redis_container():
    container, endpoint = _start(REDIS_IMAGE, REDIS_PORT, r"Ready to accept connections", 30)
    yield endpoint
    container.stop()


@pytest.fixture(scope="session")
def qdrant_url(qdrant_container: Endpoint) -> str:
    return f"http://{qdrant_container.host}:{qdrant_container.port}"


@pytest.fixture(scope="session")
def redis_url(redis_container: Endpoint) -> str:
    return f"redis://{redis_container.host}:{redis_container.port}/0"


@pytest.fixture
def qdrant_collection() -> str:
    return f"test_{uuid.uuid4().hex[:8]}"


@pytest.fixture
def key_prefix() -> str:
    return f"test{uuid.uuid4().hex[:8]}"
