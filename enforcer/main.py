"""
Entry point — start the enforcer API.

Usage:
    python -m enforcer.main
    uvicorn enforcer.api.app:app --host 127.0.0.1 --port 8780 --reload
"""

import uvicorn

from .config import config
from .logs import configure_logging


def main():
    configure_logging(config.log_level, json=config.log_json)
    uvicorn.run(
        "enforcer.api.app:app",
        host=config.api_host,
        port=config.api_port,
        reload=False,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
