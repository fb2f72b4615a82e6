"""
Module for building multipart upload requests.
"""
import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Tuple, Union

import requests

from .models import RequestBuildError, RequestConfig

logger = logging.getLogger(__name__)

FILE_FIELD = "file"


def parse_headers(raw: str) -> List[Tuple[str, str]]:
    """Parse a header string of the form 'key1:value1,key2:value2'.

    Pairs without a colon, or with an empty key, are skipped.

    Args:
        raw: Header configuration string

    Returns:
        List of (name, value) pairs with surrounding whitespace trimmed
    """
    headers = []
    if not raw:
        return headers

    for pair in raw.split(","):
        key, sep, value = pair.partition(":")
        key = key.strip()
        if not sep or not key:
            logger.debug(f"Skipping malformed header pair: {pair!r}")
            continue
        headers.append((key, value.strip()))
    return headers


def _field_text(value) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


def parse_body_fields(raw: str) -> Dict[str, str]:
    """Turn the configured JSON object into multipart form fields.

    Args:
        raw: JSON object string

    Returns:
        Mapping of field name to text value

    Raises:
        RequestBuildError: If the string is not a JSON object
    """
    if not raw:
        return {}

    try:
        data = json.loads(raw)
    except ValueError as e:
        raise RequestBuildError(f"Error parsing JSON body data: {e}") from e

    if not isinstance(data, dict):
        raise RequestBuildError(
            f"JSON body data must be an object, got {type(data).__name__}"
        )
    return {key: _field_text(value) for key, value in data.items()}


def merge_headers(pairs: List[Tuple[str, str]]) -> Dict[str, str]:
    """Fold repeated header names into a single comma-separated value."""
    merged: Dict[str, str] = {}
    canonical: Dict[str, str] = {}
    for key, value in pairs:
        name = canonical.setdefault(key.lower(), key)
        if name in merged:
            merged[name] = f"{merged[name]}, {value}"
        else:
            merged[name] = value
    return merged


def build_request(path: Union[str, Path],
                  config: RequestConfig) -> requests.PreparedRequest:
    """Build the multipart upload request for a single file.

    The whole file is read into memory.

    Args:
        path: Path of the file to upload
        config: Request configuration

    Returns:
        Prepared request ready to be sent

    Raises:
        RequestBuildError: If the file cannot be read or the body data is invalid
    """
    path = Path(path)
    try:
        with open(path, 'rb') as f:
            content = f.read()
    except OSError as e:
        raise RequestBuildError(f"Error opening file {path}: {e}") from e

    fields = parse_body_fields(config.body_data)

    try:
        prepared = requests.Request(
            method=config.method,
            url=config.server_url,
            files={FILE_FIELD: (os.path.basename(path), content)},
            data=fields,
        ).prepare()
    except requests.RequestException as e:
        raise RequestBuildError(f"Error creating request for {path}: {e}") from e

    for name, value in merge_headers(list(config.headers)).items():
        if name.lower() == "content-type":
            logger.debug("Ignoring configured Content-Type header for multipart upload")
            continue
        try:
            name.encode('latin-1')
            value.encode('latin-1')
        except UnicodeEncodeError as e:
            raise RequestBuildError(
                f"Header {name!r} cannot be sent, HTTP headers must be latin-1: {e}"
            ) from e
        prepared.headers[name] = value

    return prepared
