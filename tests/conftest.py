import pytest

from svg2png import logging_manager as log_mgr
from svg2png.config import loader


@pytest.fixture(autouse=True)
def _reset_shared_state():
    """Keep cached configuration and log level from leaking between tests."""

    loader.get_config.cache_clear()
    yield
    loader.get_config.cache_clear()
    log_mgr.configure_logging_level()
