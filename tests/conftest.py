import pytest

from protodoc.registry import SchemaRegistry

from schema_fixtures import CONFIG_PROTO, HTTP_PROTO, PROBE_PROTO, TARGETS_PROTO, build_file_set


@pytest.fixture
def file_set():
    # Deliberately not in dependency order.
    return build_file_set(CONFIG_PROTO, PROBE_PROTO, TARGETS_PROTO, HTTP_PROTO)


@pytest.fixture
def registry(file_set):
    return SchemaRegistry(file_set)
