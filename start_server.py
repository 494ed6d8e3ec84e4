"""Container entry point: serve the Cryptofolio API on $PORT."""
import logging

import uvicorn

from cryptofolio import config
from cryptofolio.core.logging import configure_logging

if __name__ == "__main__":
    configure_logging()
    logging.getLogger("cryptofolio").info(
        "Starting Cryptofolio on port %d (cache: %s)",
        config.PORT, "redis" if config.REDIS_URL else "memory",
    )
    uvicorn.run(
        "cryptofolio.app:app",
        host="0.0.0.0",
        port=config.PORT,
        log_level="info",
        proxy_headers=True,
    )
