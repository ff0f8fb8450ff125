"""
FastAPI Application Entry Point

Integrates:
  - POST /inference (prompt → generated text)
  - Health and model status checks
  - Middleware for body size limits & JSON error handling

Run: uvicorn main:app --host 127.0.0.1 --port 8080
  or python main.py --port 8080
"""

import argparse
import logging

from api import create_app
from config import Config

# Setup logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# Create FastAPI app
app = create_app()


def main(host: str = Config.HOST, port: int = Config.PORT, reload: bool = False):
    """Run the inference server."""
    import uvicorn

    logger.info(f"Server starting on http://{host}:{port}")
    logger.info(
        f"Try: curl -X POST http://{host}:{port}/inference "
        f"-H \"Content-Type: application/json\" -d '{{\"prompt\":\"Hello\"}}'"
    )

    if reload:
        # Reload needs an import string, not an app object
        uvicorn.run("main:app", host=host, port=port, reload=True)
    else:
        uvicorn.run(app, host=host, port=port, log_level=Config.LOG_LEVEL.lower())


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="On-device inference server")
    parser.add_argument("--host", default=Config.HOST, help="Host to bind to")
    parser.add_argument("--port", type=int, default=Config.PORT, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Enable hot reload")

    args = parser.parse_args()
    if not Config.validate():
        raise SystemExit(1)
    main(
        host=args.host,
        port=args.port,
        reload=args.reload or Config.ENVIRONMENT == "development",
    )
