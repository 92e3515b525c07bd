"""Entrypoint: run the knowledge federation server."""

import uvicorn

from knowledge_federation.api.app import create_app
from knowledge_federation.config.settings import Settings


def main() -> None:
    settings = Settings()
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
