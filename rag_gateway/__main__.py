"""Run the gateway with uvicorn: `python -m rag_gateway`."""

import uvicorn

from rag_gateway.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "rag_gateway.api.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
