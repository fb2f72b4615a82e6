"""
Tests for the command-line interface.
"""
import json
import logging
from pathlib import Path
import pytest
import responses

from upload_agent.cli import (
    build_config,
    build_parser,
    load_config,
    main,
    resolve_settings,
    setup_logging,
)

from conftest import SERVER_URL


@pytest.fixture(autouse=True)
def restore_logging():
    """Remove the handlers installed by setup_logging."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def parse(*argv):
    return build_parser().parse_args(list(argv))


def test_defaults_are_applied():
    """Test that unset flags fall back to defaults."""
    config = build_config(resolve_settings(parse()))

    assert config.request.server_url == "http://example.com/upload"
    assert config.request.method == "POST"
    assert config.request.headers == ()
    assert config.request.body_data == ""
    assert config.upload_dir == Path(".")
    assert config.ledger_file == Path("uploaded_files.log")
    assert config.ledger_match == "exact"
    assert config.log_file is None
    assert config.scan_interval == 1.0
    assert config.timeout == 30.0
    assert config.max_attempts == 1


def test_flags_build_request_config(tmp_path):
    """Test that flags map onto the request configuration."""
    args = parse(
        "--server-url", SERVER_URL,
        "--upload-dir", str(tmp_path),
        "--method", "put",
        "--headers", "X-Foo:bar, X-Baz:qux,bad-no-colon",
        "--body", '{"user":"alice","id":42}',
        "--ledger-match", "substring",
    )
    config = build_config(resolve_settings(args))

    assert config.request.server_url == SERVER_URL
    assert config.request.method == "PUT"
    assert config.request.headers == (("X-Foo", "bar"), ("X-Baz", "qux"))
    assert config.request.body_data == '{"user":"alice","id":42}'
    assert config.upload_dir == tmp_path
    assert config.ledger_match == "substring"


def test_config_file_is_overridden_by_flags(tmp_path):
    """Test precedence of defaults, config file and explicit flags."""
    config_file = tmp_path / "agent.json"
    config_file.write_text(json.dumps({
        "server_url": "http://from-file.test/upload",
        "method": "PATCH",
        "headers": {"Authorization": "Bearer token"},
        "body": {"source": "camera-1"},
        "scan_interval": 5,
        "unknown_key": True,
    }))
    args = parse("-c", str(config_file), "--method", "POST")
    config = build_config(resolve_settings(args))

    assert config.request.server_url == "http://from-file.test/upload"
    assert config.request.method == "POST"
    assert config.request.headers == (("Authorization", "Bearer token"),)
    assert json.loads(config.request.body_data) == {"source": "camera-1"}
    assert config.scan_interval == 5.0


def test_load_config_handles_bad_files(tmp_path):
    """Test that unreadable or invalid config files yield no settings."""
    assert load_config(None) == {}
    assert load_config(tmp_path / "missing.json") == {}

    broken = tmp_path / "broken.json"
    broken.write_text("invalid json{")
    assert load_config(broken) == {}

    not_object = tmp_path / "list.json"
    not_object.write_text("[1, 2]")
    assert load_config(not_object) == {}


def test_invalid_settings_exit_with_usage_error(tmp_path):
    """Test that invalid values are rejected before the agent starts."""
    with pytest.raises(SystemExit) as exc_info:
        main(["--server-url", "", "--once"])
    assert exc_info.value.code == 2

    with pytest.raises(SystemExit):
        main(["--max-attempts", "0", "--once"])


def test_setup_logging_writes_to_log_file(tmp_path):
    """Test that the log file receives the operational log."""
    log_file = tmp_path / "logs" / "agent.log"
    setup_logging(verbose=True, log_file=log_file)

    logging.getLogger("upload_agent.test").debug("hello from the agent")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert "hello from the agent" in log_file.read_text()
    assert logging.getLogger().level == logging.DEBUG


@responses.activate
def test_main_once_uploads_and_records(tmp_path):
    """Test a single-tick run end to end."""
    upload_dir = tmp_path / "uploads"
    upload_dir.mkdir()
    (upload_dir / "photo.jpg").write_bytes(b"\xff\xd8\xff")
    ledger_file = tmp_path / "ledger.log"
    log_file = tmp_path / "agent.log"
    responses.add(responses.POST, SERVER_URL, status=200)

    main([
        "--server-url", SERVER_URL,
        "--upload-dir", str(upload_dir),
        "--ledger-file", str(ledger_file),
        "--log-file", str(log_file),
        "--once",
    ])

    assert len(responses.calls) == 1
    assert str(upload_dir / "photo.jpg") in ledger_file.read_text()
    assert "File uploaded successfully" in log_file.read_text()


def test_config_file_header_object_keeps_commas(tmp_path):
    """Test that header values from a config object are taken verbatim."""
    config_file = tmp_path / "agent.json"
    config_file.write_text(json.dumps({
        "headers": {" Accept ": "text/html, application/json", "": "dropped"},
    }))
    config = build_config(resolve_settings(parse("-c", str(config_file))))

    assert config.request.headers == (("Accept", "text/html, application/json"),)


@responses.activate
def test_config_file_errors_reach_the_log_file(tmp_path):
    """Test that config loading problems are written to the log file."""
    upload_dir = tmp_path / "uploads"
    upload_dir.mkdir()
    broken = tmp_path / "broken.json"
    broken.write_text("invalid json{")
    log_file = tmp_path / "agent.log"

    main([
        "-c", str(broken),
        "--server-url", SERVER_URL,
        "--upload-dir", str(upload_dir),
        "--ledger-file", str(tmp_path / "ledger.log"),
        "--log-file", str(log_file),
        "--once",
    ])

    log_text = log_file.read_text()
    assert "Error loading config file" in log_text
    assert " - upload_agent.cli - ERROR - " in log_text
