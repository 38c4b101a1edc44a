"""Package entry point for ``python -m willow_wis``.

Starts the HTTP server with uvicorn on HOST:PORT from config.
"""

from willow_wis.server.app import run_api

if __name__ == "__main__":
    run_api()
