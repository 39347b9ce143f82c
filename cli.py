#!/usr/bin/env python3
"""
Command-line interface for the order delivery service.

Usage:
    uv run python cli.py [command] [options]

Commands:
    demo        Run the order lifecycle walkthrough
    test        Run the test suite
    serve       Start the API server

Examples:
    uv run python cli.py demo
    uv run python cli.py serve --reload
"""

import argparse
import subprocess
import sys


def run_demo() -> None:
    """Run the lifecycle walkthrough."""
    from delivery.demo import run_lifecycle_demo
    run_lifecycle_demo()


def run_tests(args: list[str]) -> int:
    """Run the test suite."""
    cmd = [sys.executable, "-m", "pytest"] + args
    return subprocess.run(cmd).returncode


def run_server(host: str, port: int, reload: bool) -> None:
    """Start the API server."""
    import uvicorn

    print(f"Starting server at http://{host}:{port}")
    print(f"API docs available at http://{host}:{port}/docs")
    uvicorn.run("api.main:app", host=host, port=port, reload=reload)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Order Delivery Service CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s demo
  %(prog)s test -v
  %(prog)s serve --reload
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("demo", help="Run the order lifecycle walkthrough")

    test_parser = subparsers.add_parser("test", help="Run the test suite")
    test_parser.add_argument(
        "pytest_args",
        nargs="*",
        default=[],
        help="Arguments to pass to pytest",
    )

    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    return parser


def main() -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if args.command == "demo":
        run_demo()
    elif args.command == "test":
        sys.exit(run_tests(args.pytest_args))
    elif args.command == "serve":
        run_server(args.host, args.port, args.reload)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
