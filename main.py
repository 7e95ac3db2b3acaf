"""Endless Tale — server launcher."""

import argparse
import logging
import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = os.getenv("PORT", "8080")


def main():
    parser = argparse.ArgumentParser(description="Endless Tale server")
    parser.add_argument("--host", default=HOST, help=f"Bind address (default: {HOST})")
    parser.add_argument("--port", type=int, default=int(PORT), help=f"Bind port (default: {PORT})")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Node store directory (default: ./data)")
    parser.add_argument("--no-seed", action="store_true",
                        help="Do not insert the demo story on startup")
    parser.add_argument("--reload", action="store_true",
                        help="Restart on code changes (development)")
    args = parser.parse_args()

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # create_app() reads its settings from the environment
    if args.data_dir:
        os.environ["DATA_DIR"] = str(args.data_dir.resolve())
    if args.no_seed:
        os.environ["SEED_DATA"] = "0"

    print(f"Starting server on http://{args.host}:{args.port} ...")
    uvicorn.run(
        "backend.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
