"""Run the API under uvicorn."""
from __future__ import annotations
import argparse
import os

import uvicorn

from realty_briefing.api.fastapi_app import create_app
from realty_briefing.common.config import load_settings
from realty_briefing.common.logging_setup import setup_logging

def main() -> None:
    ap = argparse.ArgumentParser(description="Run the realty briefing API")
    ap.add_argument(
        "--cfg",
        default=os.getenv("REALTY_BRIEFING_CONFIG", "configs/service.yaml"),
        help="YAML config path (environment variables take precedence)",
    )
    args = ap.parse_args()

    settings = load_settings(args.cfg)
    setup_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)

if __name__ == "__main__":
    main()
