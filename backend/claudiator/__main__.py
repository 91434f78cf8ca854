"""Run the server: ``python -m claudiator``."""
import uvicorn

from claudiator.logging_config import configure_logging
from claudiator.settings import get_settings


def main() -> None:
    settings = get_settings()
    configure_logging(settings)
    uvicorn.run(
        "claudiator.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
