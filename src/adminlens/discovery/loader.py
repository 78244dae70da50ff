"""Load OpenAPI descriptions and JSON payloads from a URL, local file, or stdin.

This is the only I/O in the discovery package.  It hands plain dictionaries
to :func:`~adminlens.discovery.extractor.parse_openapi_spec`, which never
touches the network or the filesystem itself.

The public functions are:

* :func:`load_spec` -- Load and parse a description (JSON or YAML).
* :func:`validate_openapi_version` -- Check and return the ``openapi``
  version string, rejecting Swagger 2.x.
* :func:`load_payload` -- Load a JSON response payload of any type for the
  shape classifier.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from adminlens.exceptions import SpecParseError


def load_spec(source: str) -> dict[str, Any]:
    """Load an OpenAPI description from URL, file path, or stdin ('-').

    Supports JSON and YAML; the format is detected from the content type,
    file extension, or content.

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The parsed description as a dictionary.

    Raises:
        SpecParseError: If the source cannot be loaded or is not an object.
    """
    content, hint = _read_source(source)
    result = _parse_content(content, hint=hint)
    if not isinstance(result, dict):
        raise SpecParseError(
            "Spec must be a JSON/YAML object (got "
            f"{type(result).__name__ if result is not None else 'empty document'})"
        )
    return result


def load_payload(source: str) -> Any:
    """Load a JSON payload (object, array, or scalar) from URL, file, or stdin.

    Raises:
        SpecParseError: If the source cannot be read or is not valid JSON.
    """
    content, _ = _read_source(source)
    try:
        return json.loads(content)
    except json.JSONDecodeError as exc:
        raise SpecParseError(f"Invalid JSON payload in {source}: {exc}") from exc


def _read_source(source: str) -> tuple[str, str]:
    """Return ``(content, format_hint)`` for *source*."""
    if source == "-":
        return _read_stdin(), ""
    if source.startswith(("http://", "https://")):
        return _read_url(source)
    return _read_file(source)


def _read_stdin() -> str:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")
    return content


def _read_url(url: str) -> tuple[str, str]:
    """Fetch *url*, using the response content type as a format hint.

    Raises:
        SpecParseError: If the request fails or returns an error status.
    """
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"
    return response.text, hint


def _read_file(path: str) -> tuple[str, str]:
    """Read a local file, using its extension as a format hint.

    Raises:
        SpecParseError: If the file is missing, unreadable, or empty.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"File not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"File is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"
    return content, hint


def _parse_content(content: str, hint: str = "") -> Any:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.

    Raises:
        SpecParseError: If the content cannot be parsed as either format.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            return json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc

    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as exc:
        msg = "Failed to parse spec as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise SpecParseError(msg) from exc


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Validate and return the OpenAPI version string.

    Accepts any 3.x version.  Raises for Swagger 2.x documents and for
    documents with no ``openapi`` field.

    Raises:
        SpecParseError: If the version is missing or unsupported.
    """
    if "swagger" in spec:
        raise SpecParseError(
            f"Swagger {spec['swagger']} is not supported. "
            "Only OpenAPI 3.x descriptions can be ingested."
        )

    openapi_version = spec.get("openapi")
    if openapi_version is None:
        raise SpecParseError(
            "Missing 'openapi' field. Is this an OpenAPI 3.x document?"
        )

    version_str = str(openapi_version)
    if not version_str.startswith("3."):
        raise SpecParseError(
            f"Unsupported OpenAPI version: {version_str}. "
            "Only OpenAPI 3.x descriptions can be ingested."
        )
    return version_str
