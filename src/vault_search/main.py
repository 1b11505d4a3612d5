"""Entrypoint: serve the vault search API with uvicorn."""

import uvicorn

from vault_search.config.settings import Settings


def main() -> None:
    settings = Settings()
    uvicorn.run(
        "vault_search.api.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
