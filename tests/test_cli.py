"""
CLI tests - run commands in-process against a recording transport.

Every command goes through the real SDK and dispatcher; only the network
call is replaced.
"""

import io
import json
import urllib.parse

import pytest

from parse_client import cli
from parse_client.core import client as client_module
from parse_client.core.errors import RequestError


@pytest.fixture(autouse=True)
def parse_env(monkeypatch, transport):
    monkeypatch.setenv("PARSE_APPLICATION_ID", "cli-app")
    monkeypatch.setenv("PARSE_API_KEY", "cli-key")
    monkeypatch.setenv("PARSE_URL", "https://parse.example.com/1")
    monkeypatch.setattr(client_module, "urllib_transport", transport)
    monkeypatch.setattr(cli, "is_tty", lambda: False)


def run(capsys, *args):
    """Run the CLI and return (exit_code, parsed stdout)."""
    exit_code = 0
    try:
        cli.main(list(args))
    except SystemExit as e:
        exit_code = e.code or 0
    out = capsys.readouterr().out
    return exit_code, json.loads(out) if out.strip() else None


# =============================================================================
# Raw requests
# =============================================================================


def test_get_with_where_and_options(capsys, transport):
    transport.queue(200, b'{"results": []}')
    code, out = run(capsys, "get", "classes/Animals", "--where", '{"age": {"$lt": 3}}', "--order", "-createdAt", "--count")

    assert code == 0
    assert out == {"status": 200, "body": {"results": []}}
    call = transport.last
    assert call["headers"]["X-Parse-Application-Id"] == "cli-app"
    assert call["url"] == (
        "https://parse.example.com/1/classes/Animals"
        "?where=%7B%22age%22%3A%7B%22%24lt%22%3A3%7D%7D&count=1&order=-createdAt"
    )


def test_query_prints_body(capsys, transport):
    transport.queue(200, b'{"results": [{"objectId": "a"}], "count": 1}')
    code, out = run(capsys, "query", "classes/Animals", "--limit", "1")

    assert code == 0
    assert out == {"results": [{"objectId": "a"}], "count": 1}
    assert transport.last["url"].endswith("?limit=1")


def test_extra_options_are_passed_through(capsys, transport):
    run(capsys, "query", "classes/Animals", "-o", "redirectClassNameForKey=likes", "-o", "limit=5")
    params = urllib.parse.parse_qs(urllib.parse.urlsplit(transport.last["url"]).query)
    assert params == {"limit": ["5"], "redirectClassNameForKey": ["likes"]}


def test_post_json_body(capsys, transport):
    transport.queue(201, b'{"objectId": "x1"}')
    code, out = run(capsys, "post", "classes/Animals", '{"name": "NorwegianBlue", "status": 0}')

    assert code == 0
    assert out["status"] == 201
    assert json.loads(transport.last["body"]) == {"name": "NorwegianBlue", "status": 0}


def test_put_reads_body_from_stdin(capsys, transport, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO('{"status": 1}'))
    run(capsys, "put", "classes/Animals/x1", "-")
    assert transport.last["method"] == "PUT"
    assert transport.last["body"] == b'{"status":1}'


def test_error_status_exits_nonzero_with_body(capsys, transport):
    transport.queue(404, b'{"code": 101, "error": "object not found for delete"}')
    code, out = run(capsys, "delete", "classes/Animals/gone")

    assert code == 1
    assert out == {"status": 404, "body": {"code": 101, "error": "object not found for delete"}}


# =============================================================================
# Errors
# =============================================================================


def test_invalid_where_json(capsys, transport):
    code, out = run(capsys, "get", "classes/Animals", "--where", "{not json")

    assert code == 1
    assert out["error"].startswith("Invalid JSON in --where")
    assert transport.calls == []


def test_where_must_be_object(capsys):
    code, out = run(capsys, "get", "classes/Animals", "--where", "[1, 2]")
    assert code == 1
    assert out == {"error": "--where must be a JSON object"}


def test_malformed_option_pair(capsys):
    code, out = run(capsys, "get", "classes/Animals", "-o", "novalue")
    assert code == 1
    assert "NAME=VALUE" in out["error"]


def test_missing_credentials(capsys, monkeypatch, transport):
    monkeypatch.delenv("PARSE_API_KEY")
    code, out = run(capsys, "get", "classes/Animals")

    assert code == 1
    assert out == {"error": "PARSE_API_KEY environment variable not set"}
    assert transport.calls == []


def test_connection_error(capsys, transport):
    transport.results.append(RequestError("Connection error: refused"))
    code, out = run(capsys, "get", "classes/Animals")

    assert code == 1
    assert out == {"error": "Connection error: refused"}


# =============================================================================
# Users and files
# =============================================================================


def test_users_signup_with_extra_data(capsys, transport):
    transport.queue(201, b'{"objectId": "u1", "sessionToken": "r:t"}')
    code, out = run(capsys, "users", "signup", "Duchamp", "pw", "--data", '{"email": "eros@selavy.com"}')

    assert code == 0
    assert out["sessionToken"] == "r:t"
    assert json.loads(transport.last["body"])["email"] == "eros@selavy.com"


def test_users_me(capsys, transport):
    transport.queue(200, b'{"username": "Duchamp"}')
    code, out = run(capsys, "users", "me", "r:token")

    assert out == {"username": "Duchamp"}
    assert transport.last["headers"]["X-Parse-Session-Token"] == "r:token"


def test_users_reset_password(capsys, transport):
    code, out = run(capsys, "users", "reset-password", "example@example.com")
    assert code == 0
    assert transport.last["url"].endswith("/requestPasswordReset")


def test_files_upload_guesses_content_type(capsys, transport, tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello")
    transport.queue(201, b'{"name": "abc-notes.txt", "url": "http://files/abc-notes.txt"}')

    code, out = run(capsys, "files", "upload", str(path))

    assert code == 0
    assert out["body"]["name"] == "abc-notes.txt"
    call = transport.last
    assert call["url"].endswith("/files/notes.txt")
    assert call["body"] == b"hello"
    assert call["headers"]["Content-Type"] == "text/plain"


def test_files_upload_missing_file(capsys, tmp_path):
    code, out = run(capsys, "files", "upload", str(tmp_path / "missing.bin"))
    assert code == 1
    assert out["error"].startswith("File not found")


def test_files_upload_directory(capsys, tmp_path):
    code, out = run(capsys, "files", "upload", str(tmp_path))
    assert code == 1
    assert out["error"].startswith("Cannot read")


def test_no_command_prints_help(capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main([])
    assert exc_info.value.code == 0
    assert "parse-client" in capsys.readouterr().out
