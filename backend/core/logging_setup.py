import logging
import logging.handlers
from pathlib import Path

_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def setup_logging(settings) -> None:
    """Configure root logging once: console output plus an optional rotating file."""
    root = logging.getLogger()
    root.setLevel(settings.log_level)

    fmt = logging.Formatter(_FORMAT)
    handlers: list[logging.Handler] = []

    if not any(getattr(h, "_cylinder_console", False) for h in root.handlers):
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        console._cylinder_console = True
        root.addHandler(console)
        handlers.append(console)

    if settings.log_file:
        log_path = Path(settings.log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        # avoid duplicate handlers on reload
        if not any(
            isinstance(h, logging.handlers.RotatingFileHandler)
            and getattr(h, "baseFilename", "") == str(log_path.resolve())
            for h in root.handlers
        ):
            file_handler = logging.handlers.RotatingFileHandler(
                log_path, maxBytes=5_000_000, backupCount=3, encoding="utf-8"
            )
            file_handler.setFormatter(fmt)
            root.addHandler(file_handler)
            handlers.append(file_handler)

    # uvicorn installs its own handlers; route them through ours as well
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi"):
        lg = logging.getLogger(name)
        lg.setLevel(settings.log_level)
        for h in handlers:
            if isinstance(h, logging.handlers.RotatingFileHandler):
                lg.addHandler(h)
