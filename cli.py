#!/usr/bin/env python3
"""
Command-line interface for the storefront state engine.

Usage:
    uv run python cli.py [command] [options]

Commands:
    demo        Run demo scenarios against in-memory storage
    inspect     Show the decoded contents of the stored blobs
    test        Run the test suite
    serve       Start the API server

Examples:
    uv run python cli.py demo login-merge
    uv run python cli.py inspect --data-dir ./data
    uv run python cli.py serve --reload
"""

import argparse
import json
import subprocess
import sys
from pathlib import Path
from typing import Optional

from storefront.codec import CorruptFormat, decode_cart, decode_directory, decode_user
from storefront.config import get_settings
from storefront.storage import FileStorage


def run_demo(scenario: str) -> None:
    """Run a demo scenario."""
    from storefront.demo import (
        run_all_demos,
        run_checkout_demo,
        run_login_merge_demo,
        run_self_healing_demo,
    )

    scenarios = {
        "login-merge": run_login_merge_demo,
        "self-healing": run_self_healing_demo,
        "checkout": run_checkout_demo,
        "all": run_all_demos,
    }
    if scenario not in scenarios:
        print(f"Unknown scenario: {scenario}")
        sys.exit(1)
    scenarios[scenario]()


def run_inspect(data_dir: Optional[Path]) -> None:
    """Print every stored blob decoded, or the reason it does not decode."""
    settings = get_settings()
    storage = FileStorage(data_dir or settings.data_dir)

    blobs = [
        ("session", settings.session_key, decode_user),
        ("directory", settings.users_key, decode_directory),
        ("guest cart", settings.guest_cart_key, decode_cart),
    ]
    for label, key, decode in blobs:
        print(f"--- {label} ({key})")
        try:
            text = storage.get_item(key)
        except UnicodeDecodeError as e:
            print(f"  {CorruptFormat(reason=f'blob is not valid UTF-8: {e.reason}')}")
            continue
        if text is None:
            print("  <absent>")
            continue
        result = decode(text)
        if isinstance(result, CorruptFormat):
            print(f"  {result}")
            continue
        value = result.value
        if isinstance(value, dict):
            dumped = {email: user.model_dump(mode="json", exclude={"password"}) for email, user in value.items()}
            for email in result.rejected:
                print(f"  unreadable entry kept as stored: {email}")
        elif isinstance(value, list):
            dumped = [item.model_dump(mode="json") for item in value]
        else:
            dumped = value.model_dump(mode="json", exclude={"password"})
        print(json.dumps(dumped, indent=2, ensure_ascii=False))


def run_tests(args: list[str]) -> None:
    """Run the test suite."""
    cmd = ["uv", "run", "pytest"] + args
    subprocess.run(cmd)


def run_server(host: str, port: int, reload: bool) -> None:
    """Start the API server."""
    cmd = ["uv", "run", "uvicorn", "api.main:app", f"--host={host}", f"--port={port}"]
    if reload:
        cmd.append("--reload")

    print(f"Starting server at http://{host}:{port}")
    print(f"API docs available at http://{host}:{port}/docs")
    subprocess.run(cmd)


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Storefront State CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s demo login-merge
  %(prog)s demo all
  %(prog)s inspect --data-dir ./data
  %(prog)s test -v
  %(prog)s serve --reload
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    demo_parser = subparsers.add_parser("demo", help="Run demo scenarios")
    demo_parser.add_argument(
        "scenario",
        choices=["login-merge", "self-healing", "checkout", "all"],
        help="Which scenario to run",
    )

    inspect_parser = subparsers.add_parser("inspect", help="Show stored shopper state")
    inspect_parser.add_argument("--data-dir", type=Path, default=None, help="Storage directory")

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

    args = parser.parse_args()

    if args.command == "demo":
        run_demo(args.scenario)
    elif args.command == "inspect":
        run_inspect(args.data_dir)
    elif args.command == "test":
        run_tests(args.pytest_args)
    elif args.command == "serve":
        run_server(args.host, args.port, args.reload)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
