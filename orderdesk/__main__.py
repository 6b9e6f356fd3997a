"""Run the API server: ``python -m orderdesk``."""

import uvicorn

from orderdesk.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "orderdesk.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
    )


if __name__ == "__main__":
    main()
