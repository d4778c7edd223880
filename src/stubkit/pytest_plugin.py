"""pytest integration: a per-test registry of doubles verified at teardown.

Enable it from a conftest.py:

    pytest_plugins = ["stubkit.pytest_plugin"]

then request the fixture:

    def test_saves_once(stub_registry):
        user = create_double(User, {"save": once()}, registry=stub_registry)
        ...
"""

from collections.abc import Iterator

import pytest

from stubkit.config import StubkitConfig, load_config
from stubkit.verifier import StubRegistry

_CONFIG_KEY = pytest.StashKey[StubkitConfig]()


def pytest_configure(config: pytest.Config) -> None:
    config.stash[_CONFIG_KEY] = load_config(config.rootpath)


@pytest.fixture
def stub_registry(request: pytest.FixtureRequest) -> Iterator[StubRegistry]:
    """Registry whose doubles are verified when the test finishes.

    Verification is skipped when `[tool.stubkit] auto_verify = false`.
    """
    registry = StubRegistry()
    yield registry
    stubkit_config = request.config.stash.get(_CONFIG_KEY, StubkitConfig.default())
    if stubkit_config.auto_verify:
        registry.verify()
