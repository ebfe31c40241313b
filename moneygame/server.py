import logging
import os

import uvicorn

from moneygame.settings import load_settings

logger = logging.getLogger(__name__)
APP_MODULE = "moneygame.main:app"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def _port_from_env() -> int:
    for key in ("APP_PORT", "PORT"):
        value = os.getenv(key)
        if value:
            try:
                return int(value)
            except ValueError:
                logger.warning("Ignoring %s=%s (not an integer)", key, value)
    return 8000


def _ssl_kwargs() -> dict[str, str]:
    cert = os.getenv("SSL_CERT_FILE")
    key = os.getenv("SSL_KEY_FILE")
    if not cert and not key:
        return {}
    if not cert or not key:
        logger.warning("Both SSL_CERT_FILE and SSL_KEY_FILE are required for HTTPS, ignoring partial config.")
        return {}

    ssl_kwargs: dict[str, str] = {"ssl_certfile": cert, "ssl_keyfile": key}
    password = os.getenv("SSL_KEY_PASSWORD")
    if password:
        ssl_kwargs["ssl_keyfile_password"] = password

    logger.info("Starting HTTPS server using %s/%s", cert, key)
    return ssl_kwargs


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)
    host = os.getenv("APP_HOST", "0.0.0.0")
    port = _port_from_env()
    uvicorn.run(
        APP_MODULE,
        host=host,
        port=port,
        log_level=os.getenv("UVICORN_LOG_LEVEL", settings.log_level.lower()),
        **_ssl_kwargs(),
    )


if __name__ == "__main__":
    main()
