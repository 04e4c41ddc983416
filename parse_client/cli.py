"""
Parse CLI - Command-line interface.

This layer provides user-facing commands, using the SDK layer for all
operations. It handles:
- Argument parsing
- Loading credentials from the environment or a .env file
- TTY detection for human vs machine output
- JSON output for piping/automation
"""

import argparse
import json
import logging
import mimetypes
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from parse_client.core.client import DEFAULT_TIMEOUT
from parse_client.core.errors import ClientError, ConfigurationError
from parse_client.core.types import Response
from parse_client.sdk import ParseClient

# =============================================================================
# Output Helpers
# =============================================================================


def is_tty() -> bool:
    """Check if stdout is a TTY (human) or pipe (machine)."""
    return sys.stdout.isatty()


def json_output(data: Any, pretty: bool = False) -> None:
    """Print JSON output."""
    indent = 2 if pretty or is_tty() else None
    print(json.dumps(data, indent=indent, default=str))


def error_output(error: ClientError) -> None:
    """Print error and exit."""
    json_output(error.to_dict())
    sys.exit(1)


def response_output(response: Response) -> None:
    """Print a response; exit 1 when its status is not 2xx."""
    json_output({"status": response.status_code, "body": response.body})
    if not response.ok:
        sys.exit(1)


def table_output(
    headers: list[str],
    rows: list[list[str]],
    widths: list[int],
) -> None:
    """Print a formatted table for human output."""
    header_line = "  ".join(h.ljust(w) for h, w in zip(headers, widths))
    print(header_line)
    print("-" * len(header_line))

    for row in rows:
        print("  ".join(str(v)[:w].ljust(w) for v, w in zip(row, widths)))


def read_json_arg(value: str, label: str) -> Any:
    """Parse a JSON argument, reading stdin when the value is "-"."""
    try:
        if value == "-":
            return json.load(sys.stdin)
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {label}: {e}")


def parse_option_pairs(pairs: list[str] | None) -> dict[str, Any]:
    """Turn NAME=VALUE strings into options; values that parse as JSON are decoded."""
    options: dict[str, Any] = {}
    for pair in pairs or []:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise ConfigurationError(f"Invalid option '{pair}', expected NAME=VALUE")
        try:
            options[name] = json.loads(value)
        except json.JSONDecodeError:
            options[name] = value
    return options


def query_args(args: argparse.Namespace) -> tuple[dict[str, Any], dict[str, Any]]:
    """Build (filters, options) from the shared query flags."""
    filters = read_json_arg(args.where, "--where") if args.where else {}
    if not isinstance(filters, dict):
        raise ConfigurationError("--where must be a JSON object")

    options = parse_option_pairs(args.option)
    if args.order:
        options["order"] = args.order
    if args.limit is not None:
        options["limit"] = args.limit
    if args.skip is not None:
        options["skip"] = args.skip
    if args.count:
        options["count"] = 1
    if args.include:
        options["include"] = args.include
    if args.keys:
        options["keys"] = args.keys
    return filters, options


# =============================================================================
# CLI Commands
# =============================================================================


def cmd_get(client: ParseClient, args: argparse.Namespace) -> None:
    """GET a path, with optional filters and options."""
    try:
        filters, options = query_args(args)
        response_output(client.get(args.path, filters, options))
    except ClientError as e:
        error_output(e)


def cmd_query(client: ParseClient, args: argparse.Namespace) -> None:
    """GET a path and print only the body."""
    try:
        filters, options = query_args(args)
        body = client.query(args.path, filters, options)

        results = body.get("results") if isinstance(body, dict) else None
        if is_tty() and isinstance(results, list):
            if not results:
                print("No objects found.")
                return

            table_output(
                ["Object ID", "Created", "Updated"],
                [[r.get("objectId", ""), r.get("createdAt", ""), r.get("updatedAt", "")] for r in results],
                [12, 26, 26],
            )
            if "count" in body:
                print(f"\nShowing {len(results)} of {body['count']} objects")
        else:
            json_output(body)
    except ClientError as e:
        error_output(e)


def cmd_post(client: ParseClient, args: argparse.Namespace) -> None:
    """POST a JSON body to a path."""
    try:
        response_output(client.post(args.path, read_json_arg(args.body, "body")))
    except ClientError as e:
        error_output(e)


def cmd_put(client: ParseClient, args: argparse.Namespace) -> None:
    """PUT a JSON body to a path."""
    try:
        response_output(client.put(args.path, read_json_arg(args.body, "body")))
    except ClientError as e:
        error_output(e)


def cmd_delete(client: ParseClient, args: argparse.Namespace) -> None:
    """DELETE a path."""
    try:
        response_output(client.delete(args.path))
    except ClientError as e:
        error_output(e)


def cmd_users_signup(client: ParseClient, args: argparse.Namespace) -> None:
    """Sign up a new user."""
    try:
        extra = read_json_arg(args.data, "--data") if args.data else None
        json_output(client.users.signup(args.username, args.password, extra))
    except ClientError as e:
        error_output(e)


def cmd_users_login(client: ParseClient, args: argparse.Namespace) -> None:
    """Log in and print the user with its session token."""
    try:
        json_output(client.users.login(args.username, args.password))
    except ClientError as e:
        error_output(e)


def cmd_users_reset(client: ParseClient, args: argparse.Namespace) -> None:
    """Request a password reset email."""
    try:
        response_output(client.users.request_password_reset(args.email))
    except ClientError as e:
        error_output(e)


def cmd_users_me(client: ParseClient, args: argparse.Namespace) -> None:
    """Show the user a session token belongs to."""
    try:
        json_output(client.users.validate(args.session_token))
    except ClientError as e:
        error_output(e)


def cmd_users_delete(client: ParseClient, args: argparse.Namespace) -> None:
    """Delete a user."""
    try:
        response_output(client.users.delete(args.object_id, args.session_token))
    except ClientError as e:
        error_output(e)


def cmd_files_upload(client: ParseClient, args: argparse.Namespace) -> None:
    """Upload a local file."""
    try:
        path = Path(args.file)
        try:
            contents = path.read_bytes()
        except FileNotFoundError:
            raise ConfigurationError(f"File not found: {args.file}")
        except OSError as e:
            raise ConfigurationError(f"Cannot read {args.file}: {e.strerror or e}")

        content_type = args.content_type or mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        response_output(client.files.upload(args.name or path.name, contents, content_type))
    except ClientError as e:
        error_output(e)


# =============================================================================
# Main CLI
# =============================================================================


def add_query_flags(parser: argparse.ArgumentParser) -> None:
    """Flags shared by get and query."""
    parser.add_argument("path", help="API path, e.g. classes/Animals")
    parser.add_argument("--where", "-w", help='Filters as a JSON object (or - for stdin), e.g. \'{"age": {"$lt": 3}}\'')
    parser.add_argument("--order", help="Sort key(s), comma separated; prefix with - for descending")
    parser.add_argument("--limit", "-l", type=int, help="Max results")
    parser.add_argument("--skip", type=int, help="Number of results to skip")
    parser.add_argument("--count", action="store_true", help="Include the total match count")
    parser.add_argument("--include", help="Pointer fields to include, comma separated")
    parser.add_argument("--keys", help="Fields to return, comma separated")
    parser.add_argument(
        "--option",
        "-o",
        action="append",
        metavar="NAME=VALUE",
        help="Extra query option, passed through as-is (repeatable)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="parse-client",
        description="Parse Client - Command-line interface for the Parse REST API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration (environment or .env):
  PARSE_APPLICATION_ID, PARSE_API_KEY, PARSE_URL

Examples:
  parse-client query classes/Animals --where '{"age": {"$lt": 3}}' --order -createdAt
  parse-client post classes/Animals '{"name": "NorwegianBlue", "status": 0}'
  parse-client users login Duchamp 'L_H;OO#Q'
  parse-client files upload ./photo.png
""",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log requests to stderr")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="Request timeout in seconds")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # ========== Raw requests ==========
    get = subparsers.add_parser("get", help="GET a path and print status and body")
    add_query_flags(get)
    get.set_defaults(func=cmd_get)

    query = subparsers.add_parser("query", help="GET a path and print only the body")
    add_query_flags(query)
    query.set_defaults(func=cmd_query)

    post = subparsers.add_parser("post", help="Create an object")
    post.add_argument("path", help="API path, e.g. classes/Animals")
    post.add_argument("body", help="JSON body (or - for stdin)")
    post.set_defaults(func=cmd_post)

    put = subparsers.add_parser("put", help="Update an object")
    put.add_argument("path", help="API path, e.g. classes/Animals/<objectId>")
    put.add_argument("body", help="JSON body (or - for stdin)")
    put.set_defaults(func=cmd_put)

    delete = subparsers.add_parser("delete", help="Delete an object")
    delete.add_argument("path", help="API path, e.g. classes/Animals/<objectId>")
    delete.set_defaults(func=cmd_delete)

    # ========== Users ==========
    users = subparsers.add_parser("users", help="Sign up, log in and manage users")
    users.set_defaults(func=lambda _c, _a: users.print_help())
    users_sub = users.add_subparsers(dest="subcommand")

    u_signup = users_sub.add_parser("signup", help="Sign up a new user")
    u_signup.add_argument("username", help="Username")
    u_signup.add_argument("password", help="Password")
    u_signup.add_argument("--data", "-d", help="Extra fields as a JSON object, e.g. email")
    u_signup.set_defaults(func=cmd_users_signup)

    u_login = users_sub.add_parser("login", help="Log in")
    u_login.add_argument("username", help="Username")
    u_login.add_argument("password", help="Password")
    u_login.set_defaults(func=cmd_users_login)

    u_reset = users_sub.add_parser("reset-password", help="Request a password reset email")
    u_reset.add_argument("email", help="Email address of the user")
    u_reset.set_defaults(func=cmd_users_reset)

    u_me = users_sub.add_parser("me", help="Validate a session token")
    u_me.add_argument("session_token", help="Session token")
    u_me.set_defaults(func=cmd_users_me)

    u_delete = users_sub.add_parser("delete", help="Delete a user")
    u_delete.add_argument("object_id", help="User objectId")
    u_delete.add_argument("session_token", help="Session token of that user")
    u_delete.set_defaults(func=cmd_users_delete)

    # ========== Files ==========
    files = subparsers.add_parser("files", help="Upload files")
    files.set_defaults(func=lambda _c, _a: files.print_help())
    files_sub = files.add_subparsers(dest="subcommand")

    f_upload = files_sub.add_parser("upload", help="Upload a local file")
    f_upload.add_argument("file", help="Path of the file to upload")
    f_upload.add_argument("--name", "-n", help="Stored file name (defaults to the local name)")
    f_upload.add_argument("--content-type", "-t", help="MIME type (guessed from the name if omitted)")
    f_upload.set_defaults(func=cmd_files_upload)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    # Environment variables already set win over .env
    load_dotenv(Path.cwd() / ".env")

    client = ParseClient(timeout=args.timeout)

    # Run command (all subparsers have default funcs that print help)
    args.func(client, args)


if __name__ == "__main__":
    main()
