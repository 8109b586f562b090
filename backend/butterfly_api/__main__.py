"""Run the API with uvicorn: ``python -m butterfly_api``."""

import uvicorn

from butterfly_api.config import settings


def main() -> None:
    uvicorn.run(
        "butterfly_api.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
