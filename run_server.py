#!/usr/bin/env python3
"""
Development server launcher for the Passthrough VLM API.

This script starts the FastAPI server with appropriate settings for development.
For production, you'd use a proper ASGI server deployment.
"""

import argparse
import logging
import sys
from pathlib import Path

import uvicorn

# Add src to Python path so imports work without an install
project_root = Path(__file__).parent
src_path = project_root / "src"
sys.path.insert(0, str(src_path))


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the Passthrough VLM API server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--debug", action="store_true", help="Verbose pipeline logging")
    parser.add_argument("--reload", action="store_true", help="Auto-reload on code changes (development only)")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("Starting Passthrough VLM API Development Server")
    print(f"Server will be available at: http://localhost:{args.port}")
    print(f"API documentation at: http://localhost:{args.port}/docs")

    uvicorn.run(
        "passthrough_vlm.api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        reload_dirs=[str(src_path)] if args.reload else None,
        log_level="debug" if args.debug else "info",
    )


if __name__ == "__main__":
    main()
