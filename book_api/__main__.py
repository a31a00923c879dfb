"""Run the API with uvicorn: python -m book_api [--host H] [--port P]."""

import argparse

import uvicorn


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="book_api")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=3000)
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args(argv)
    uvicorn.run("book_api.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
