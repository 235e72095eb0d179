from __future__ import annotations

from seqtask.config import load_settings
from seqtask.logging import configure_logging, get_logger


def main() -> int:
    """
    Programmatic entrypoint.

    Recommended dev command:
      uvicorn seqtask.api.app:app --reload

    This entrypoint exists so you can also do:
      python -m seqtask.main
    """
    settings = load_settings()
    configure_logging(settings.log_level)
    log = get_logger(__name__)

    try:
        import uvicorn
    except ImportError:
        log.error("uvicorn is not installed. Install with: pip install uvicorn")
        return 1

    log.info("Starting seqtask API on %s:%d", settings.host, settings.port)
    uvicorn.run(
        "seqtask.api.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        reload=False,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
