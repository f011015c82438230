import logging
import sys

import uvicorn

from .config import get_settings
from .web.server import get_app


def main() -> None:  # noqa: D401
    """CLI entry point declared in pyproject.toml."""

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s | %(levelname)8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    _log = logging.getLogger(__name__)
    _log.info("Guild bulk operations API listening on http://%s:%d", settings.host, settings.port)

    try:
        uvicorn.run(get_app(settings), host=settings.host, port=settings.port, log_level="info")
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":  # pragma: no cover
    main()
