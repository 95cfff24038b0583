import logging

import click
import uvicorn
from dotenv import load_dotenv

from authgate.config.provider import EnvConfigProvider
from authgate.logging_config import get_logging_config

load_dotenv()

logger = logging.getLogger(__name__)


@click.command()
@click.option("--host", default=None, help="Bind address (defaults to API_HOST)")
@click.option("--port", default=None, type=int, help="Port (defaults to API_PORT)")
@click.option("--reload", is_flag=True, default=False, help="Reload on code changes")
def main(host, port, reload):
    """Run the authgate API server."""
    api_config = EnvConfigProvider().get_api_config()
    host = host or api_config.host
    port = port or api_config.port

    logger.info(f"Starting authgate API on {host}:{port}")
    uvicorn.run(
        "authgate.main:create_app",
        factory=True,
        host=host,
        port=port,
        log_level=api_config.log_level.lower(),
        reload=reload or api_config.debug,
        log_config=get_logging_config(api_config.log_level),
    )


if __name__ == "__main__":
    main()
