import logging

import uvicorn
from dotenv import load_dotenv

from app_logging import setup_logging
from config import build_account_store, load_settings
from interfaces.http.handlers import create_http_app


load_dotenv()

logger = logging.getLogger(__name__)


def main() -> None:
    settings = load_settings()
    setup_logging(settings.log_level, json_output=settings.json_logs)

    store = build_account_store(settings)
    app = create_http_app(store)

    logger.info(
        "starting server",
        extra={"env": settings.env, "backend": settings.db_backend, "port": settings.http_port},
    )
    uvicorn.run(app, host=settings.http_host, port=settings.http_port, log_config=None)


if __name__ == "__main__":
    main()
