"""RPG Weaver — dev launcher. Starts the API server (or the MCP server) in watch mode."""

import argparse
import logging
import os
import signal
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = os.getenv("PORT", "13015")
LOG_LEVEL = os.getenv("LOG_LEVEL", "info")


def main():
    parser = argparse.ArgumentParser(description="RPG Weaver dev launcher")
    parser.add_argument("--port", default=PORT, help=f"API port (default: {PORT})")
    parser.add_argument("--no-reload", action="store_true",
                        help="Run without uvicorn's file watcher")
    parser.add_argument("--mcp", action="store_true",
                        help="Run the MCP tool server on stdio instead of the API")
    args = parser.parse_args()

    logging.basicConfig(
        level=LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.mcp:
        cmd = [sys.executable, "-m", "backend.mcp_server"]
    else:
        cmd = [
            "uv", "run", "uvicorn", "backend.app:app",
            "--host", HOST, "--port", str(args.port), "--log-level", LOG_LEVEL.lower(),
        ]
        if not args.no_reload:
            cmd.append("--reload")

    proc = subprocess.Popen(cmd, cwd=ROOT, env=os.environ.copy())

    def shutdown(*_):
        print("\nShutting down...")
        proc.terminate()
        proc.wait()
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    if not args.mcp:
        print(f"Starting API on http://localhost:{args.port} ...")
    proc.wait()


if __name__ == "__main__":
    main()
