"""Run the Herald API with Uvicorn: ``python -m herald [--host H] [--port P]``."""

import argparse

import uvicorn

from herald.config import get_settings


def main(argv: list[str] | None = None) -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(prog="herald")
    parser.add_argument("--host", default=settings.server.host)
    parser.add_argument("--port", type=int, default=settings.server.port)
    parser.add_argument("--workers", type=int, default=settings.server.workers)
    args = parser.parse_args(argv)

    uvicorn.run(
        "herald.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        workers=args.workers,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
