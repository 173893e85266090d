import logging
import logging.handlers
from types import SimpleNamespace

import pytest

from core.config import _split_csv
from core.logging_setup import setup_logging
from db.database import normalize_database_url


@pytest.mark.parametrize(
    "url, expected",
    [
        ("postgres://u:p@db/inv", "postgresql+asyncpg://u:p@db/inv"),
        ("postgresql://u:p@db/inv", "postgresql+asyncpg://u:p@db/inv"),
        ("postgresql+asyncpg://u:p@db/inv", "postgresql+asyncpg://u:p@db/inv"),
        ("sqlite+aiosqlite:///./local.db", "sqlite+aiosqlite:///./local.db"),
    ],
)
def test_database_url_normalization(url, expected):
    assert normalize_database_url(url) == expected


def test_cors_origins_split():
    assert _split_csv(" http://a.test, ,http://b.test ") == ["http://a.test", "http://b.test"]


@pytest.fixture
def clean_root_logger():
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    yield root
    for h in list(root.handlers):
        if h not in before and isinstance(h, logging.handlers.RotatingFileHandler):
            root.removeHandler(h)
            h.close()
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi"):
        lg = logging.getLogger(name)
        for h in list(lg.handlers):
            if isinstance(h, logging.handlers.RotatingFileHandler):
                lg.removeHandler(h)
    root.setLevel(level)


def test_setup_logging_adds_file_handler_once(tmp_path, clean_root_logger):
    log_file = tmp_path / "logs" / "api.log"
    settings = SimpleNamespace(log_level="DEBUG", log_file=str(log_file))

    setup_logging(settings)
    setup_logging(settings)

    file_handlers = [
        h for h in clean_root_logger.handlers
        if isinstance(h, logging.handlers.RotatingFileHandler) and h.baseFilename == str(log_file.resolve())
    ]
    assert len(file_handlers) == 1
    assert clean_root_logger.level == logging.DEBUG

    logging.getLogger("services.submissions").info("hello from the test")
    file_handlers[0].flush()
    assert "hello from the test" in log_file.read_text(encoding="utf-8")
