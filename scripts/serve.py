from __future__ import annotations

import argparse

import uvicorn


def main() -> None:
    """Serve the handbook assistant API with uvicorn."""
    parser = argparse.ArgumentParser(description="Run the handbook assistant HTTP API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=3001)
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args()

    uvicorn.run(
        "handbook_assistant.api:build_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
