"""Command-line entrypoint that serves the API with uvicorn."""

import os

import uvicorn


def main() -> None:
    """Run the ASGI app on ``HOST``/``PORT`` (default 0.0.0.0:10000)."""
    uvicorn.run(
        "commission_desk.api.asgi:app",
        host=os.getenv("HOST", "0.0.0.0"),  # noqa: S104
        port=int(os.getenv("PORT", "10000")),
    )


if __name__ == "__main__":
    main()
