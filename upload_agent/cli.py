"""
Command-line interface for the upload agent.
"""
import argparse
import logging
import sys
import threading
from pathlib import Path
import signal
import json
from typing import List, Optional, Tuple

from .coordinator import UploadCoordinator
from .models import LEDGER_MATCH_MODES, AgentConfig, RequestBuildError, RequestConfig
from .request_builder import parse_body_fields, parse_headers

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

DEFAULTS = {
    'server_url': 'http://example.com/upload',
    'upload_dir': '.',
    'log_file': None,
    'ledger_file': 'uploaded_files.log',
    'ledger_match': 'exact',
    'method': 'POST',
    'headers': '',
    'body': '',
    'interval': 1.0,
    'timeout': 30.0,
    'max_attempts': 1,
}


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """Configure logging for the application.

    Args:
        verbose: Whether to enable debug logging
        log_file: Optional file that receives a copy of the log stream
    """
    level = logging.DEBUG if verbose else logging.INFO
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        try:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_file, encoding='utf-8'))
        except OSError as e:
            print(f"Failed to log to file {log_file}, using stdout only: {e}",
                  file=sys.stderr)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )


def load_config(config_file: Optional[Path] = None) -> dict:
    """Load configuration from a JSON file.

    Args:
        config_file: Path to config file

    Returns:
        Dictionary of configuration values
    """
    if not config_file:
        return {}

    try:
        with open(config_file) as f:
            data = json.load(f)
    except Exception as e:
        logger.error(f"Error loading config file: {e}")
        return {}

    if not isinstance(data, dict):
        logger.error(f"Config file {config_file} must contain a JSON object")
        return {}
    return data


def _headers_setting(value) -> List[Tuple[str, str]]:
    if isinstance(value, dict):
        return [(str(k).strip(), str(v).strip()) for k, v in value.items()
                if str(k).strip()]
    return parse_headers(value or "")


def _body_setting(value) -> str:
    if isinstance(value, dict):
        return json.dumps(value)
    return value or ""


def resolve_settings(args: argparse.Namespace) -> dict:
    """Merge defaults, the config file and explicit flags, in that order.

    Args:
        args: Command line arguments

    Returns:
        Dictionary of effective settings
    """
    settings = dict(DEFAULTS)
    file_settings = load_config(getattr(args, 'config', None))
    for key, value in file_settings.items():
        if key == 'scan_interval':
            key = 'interval'
        if key in settings:
            settings[key] = value
        else:
            logger.warning(f"Ignoring unknown config key: {key}")

    for key in DEFAULTS:
        value = getattr(args, key, None)
        if value is not None:
            settings[key] = value

    settings['headers'] = _headers_setting(settings['headers'])
    settings['body'] = _body_setting(settings['body'])
    return settings


def build_config(settings: dict) -> AgentConfig:
    """Create the agent configuration from effective settings.

    Args:
        settings: Output of resolve_settings

    Returns:
        Configured AgentConfig instance

    Raises:
        ValueError: If a setting is invalid
    """
    request = RequestConfig(
        server_url=settings['server_url'],
        method=settings['method'],
        headers=tuple(settings['headers']),
        body_data=settings['body']
    )
    log_file = settings['log_file']
    return AgentConfig(
        upload_dir=Path(settings['upload_dir']),
        request=request,
        ledger_file=Path(settings['ledger_file']),
        ledger_match=settings['ledger_match'],
        log_file=Path(log_file) if log_file else None,
        scan_interval=float(settings['interval']),
        timeout=float(settings['timeout']) if settings['timeout'] else None,
        max_attempts=int(settings['max_attempts'])
    )


def check_config(config: AgentConfig) -> None:
    """Warn about settings that will make every upload attempt fail.

    Args:
        config: Agent configuration
    """
    if not config.upload_dir.exists():
        logger.warning(f"Upload path does not exist yet: {config.upload_dir}")
    try:
        parse_body_fields(config.request.body_data)
    except RequestBuildError as e:
        logger.warning(f"{e}; every upload attempt will fail until it is fixed")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Watch a directory and upload every new file once over HTTP"
    )
    parser.add_argument('-v', '--verbose', action='store_true',
                        help="Enable verbose logging")
    parser.add_argument('-c', '--config', type=Path,
                        help="Path to JSON config file")
    parser.add_argument('--server-url', dest='server_url', type=str,
                        help="Server URL for file upload")
    parser.add_argument('--upload-dir', dest='upload_dir', type=str,
                        help="Directory to watch for new files")
    parser.add_argument('--log-file', dest='log_file', type=str,
                        help="Log file path")
    parser.add_argument('--ledger-file', dest='ledger_file', type=str,
                        help="File recording uploaded paths")
    parser.add_argument('--ledger-match', dest='ledger_match',
                        choices=LEDGER_MATCH_MODES,
                        help="How ledger entries are matched against file paths")
    parser.add_argument('--method', type=str,
                        help="HTTP method for file upload")
    parser.add_argument('--headers', type=str,
                        help="Headers to include in the request, formatted as "
                             "'key1:value1,key2:value2'")
    parser.add_argument('--body', type=str,
                        help="JSON data to include in the request body")
    parser.add_argument('--interval', type=float,
                        help="Seconds to wait between scans")
    parser.add_argument('--timeout', type=float,
                        help="Request timeout in seconds")
    parser.add_argument('--max-attempts', dest='max_attempts', type=int,
                        help="Attempts per upload on connection errors")
    parser.add_argument('--once', action='store_true',
                        help="Run a single scan and exit")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Config file problems are reported through the flag-level log setup
    setup_logging(args.verbose, Path(args.log_file) if args.log_file else None)
    settings = resolve_settings(args)
    try:
        config = build_config(settings)
    except (TypeError, ValueError) as e:
        parser.error(str(e))

    if config.log_file and str(config.log_file) != args.log_file:
        setup_logging(args.verbose, config.log_file)
    check_config(config)

    coordinator = UploadCoordinator(config)

    if args.once:
        coordinator.run_tick()
        return

    stop_event = threading.Event()

    def _stop(signum, frame):
        logger.info(f"Received signal {signum}, stopping after the current scan")
        stop_event.set()

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)

    coordinator.run_forever(stop_event=stop_event)
    logger.info("Upload agent stopped")


if __name__ == '__main__':
    main()
