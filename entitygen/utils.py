"""Utility functions for loading schema documents.

This module provides functions for loading schema documents from files and
URLs with proper error handling and validation.
"""

import json
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import requests

from .logging_config import get_logger

logger = get_logger(__name__)


class SchemaLoaderError(Exception):
    """Custom exception for schema document loading errors."""

    pass


def _require_object(data: Any, source: str) -> dict:
    if not isinstance(data, dict):
        logger.error(f"Schema document is not a JSON object: {source}")
        raise SchemaLoaderError(f"Schema document must be a JSON object: {source}")
    return data


def load_schema_from_file(file_path: str | Path) -> tuple[str, dict]:
    """Load a schema document from a local file.

    Args:
        file_path: Path to the JSON schema document.

    Returns:
        Tuple of (source description, parsed document).

    Raises:
        FileNotFoundError: If file doesn't exist.
        SchemaLoaderError: If file cannot be read or is not a JSON object.
    """
    file_path = Path(file_path)
    logger.debug(f"Attempting to load schema from file: {file_path}")

    if not file_path.exists():
        logger.error(f"File not found: {file_path}")
        raise FileNotFoundError(f"File not found: {file_path}")

    if file_path.suffix.lower() != ".json":
        logger.warning(f"File does not have .json extension: {file_path}")

    try:
        with file_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in file {file_path}: {e}")
        raise SchemaLoaderError(f"Invalid JSON in file {file_path}: {e}") from e
    except OSError as e:
        logger.error(f"Error reading file {file_path}: {e}")
        raise SchemaLoaderError(f"Error reading file {file_path}: {e}") from e

    logger.info(f"Loaded schema document from {file_path}")
    return str(file_path), _require_object(data, str(file_path))


def load_schema_from_url(url: str, timeout: int = 30) -> tuple[str, dict]:
    """Load a schema document from a URL.

    Args:
        url: URL to fetch the document from.
        timeout: Request timeout in seconds.

    Returns:
        Tuple of (source description, parsed document).

    Raises:
        SchemaLoaderError: If URL is invalid, request fails, or response isn't a JSON object.
    """
    logger.debug(f"Attempting to load schema from URL: {url}")

    parsed_url = urlparse(url)
    if parsed_url.scheme not in ("http", "https") or not parsed_url.netloc:
        logger.error(f"Invalid URL format: {url}")
        raise SchemaLoaderError(f"Invalid URL: {url}")

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except requests.exceptions.Timeout as e:
        logger.error(f"Request timeout for URL: {url}")
        raise SchemaLoaderError(f"Request timeout for URL: {url}") from e
    except requests.exceptions.ConnectionError as e:
        logger.error(f"Connection error for URL {url}: {e}")
        raise SchemaLoaderError(f"Connection error for URL: {url}") from e
    except requests.exceptions.HTTPError as e:
        logger.error(f"HTTP error {e.response.status_code} for URL: {url}")
        raise SchemaLoaderError(
            f"HTTP error {e.response.status_code} for URL: {url}"
        ) from e
    except requests.exceptions.RequestException as e:
        # Also covers invalid JSON bodies (requests.JSONDecodeError)
        logger.error(f"Request error for URL {url}: {e}")
        raise SchemaLoaderError(f"Request error for URL {url}: {e}") from e

    logger.info(f"Loaded schema document from {url}")
    return url, _require_object(data, url)


def load_schema_document(
    file_path: str | Path | None = None,
    url: str | None = None,
    timeout: int = 30,
) -> tuple[str, dict]:
    """Load a schema document from either a file or URL.

    Args:
        file_path: Path to local JSON file (mutually exclusive with url).
        url: URL to fetch JSON from (mutually exclusive with file_path).
        timeout: Request timeout in seconds (only used for URLs).

    Returns:
        Tuple of (source description, parsed document).

    Raises:
        SchemaLoaderError: If neither or both parameters are provided, or loading fails.
        FileNotFoundError: If file doesn't exist.
    """
    if not file_path and not url:
        raise SchemaLoaderError("Either file_path or url must be provided")

    if file_path and url:
        raise SchemaLoaderError("Cannot specify both file_path and url")

    if file_path:
        return load_schema_from_file(file_path)
    return load_schema_from_url(url, timeout)


def write_units(units: dict, output_dir: str | Path) -> list[Path]:
    """Write generated units to a directory, one file per unit id.

    Args:
        units: Mapping of unit id to OutputUnit.
        output_dir: Target directory, created if missing.

    Returns:
        Paths written, in unit id order.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for unit_id in sorted(units):
        path = output_dir / unit_id
        path.write_text(units[unit_id].text, encoding="utf-8", newline="")
        written.append(path)
        logger.debug(f"Wrote {path}")

    return written
