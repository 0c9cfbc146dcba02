import logging

import pytest

_ENV_VARS = (
    "CHATCMD_PREFIX",
    "CHATCMD_OPTION_PREFIX",
    "CHATCMD_FLUSH_TRAILING",
    "CHATCMD_LOG_LEVEL",
    "CHATCMD_PROFILE",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    # CLI entry points install a handler bound to the captured stderr
    logger = logging.getLogger("chatcmd")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
