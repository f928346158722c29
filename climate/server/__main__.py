"""Web server entrypoint.

Runs the Starlette web application using uvicorn. For production,
use uvicorn directly with appropriate socket options:

    uvicorn climate.server:app --host 0.0.0.0 --port 5000

Run a single worker when EMBED_SCHEDULER=1: every worker process would
start its own scheduler.

Usage: python -m climate.server
"""
import uvicorn


def main() -> None:
    """Run the web server for local development."""
    uvicorn.run(
        "climate.server:app",
        host="0.0.0.0",
        port=5000,
        reload=True,
    )


if __name__ == "__main__":
    main()
