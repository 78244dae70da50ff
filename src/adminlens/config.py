"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for adminlens:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.adminlens/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_products_dir`.
* **Global config** -- A single :class:`~adminlens.models.GlobalConfig`
  JSON file storing defaults (output format, default product, engine
  tunables and field rules).
* **Products** -- One JSON file per managed product, each deserialised into
  a :class:`~adminlens.models.ProductProfile`. Managed via
  :func:`load_product`, :func:`save_product`, :func:`delete_product`.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.

The discovery and shape engines never read configuration themselves; the
CLI resolves it here and passes :class:`~adminlens.models.EngineConfig`
into each call.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from adminlens.exceptions import ConfigError
from adminlens.models import GlobalConfig, ProductProfile

_APP_NAME = "adminlens"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "adminlens.json"

ENV_PRODUCT = "ADMINLENS_PRODUCT"
ENV_BASE_URL = "ADMINLENS_BASE_URL"
ENV_SAMPLE_SIZE = "ADMINLENS_SAMPLE_SIZE"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/adminlens/`` (default ``~/.config/adminlens/``).
    On macOS/Windows: ``~/.adminlens/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CONFIG_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".config"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_products_dir() -> Path:
    """Return the products directory (``<config_dir>/products/``), creating it if necessary."""
    path = get_config_dir() / "products"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems.  On any failure
    the temp file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


def _read_json(path: Path, what: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid {what} at {path}: {exc}") from exc


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~adminlens.models.GlobalConfig`, or a
        default instance when the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    data = _read_json(path, "global config")
    try:
        return GlobalConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Products ---


def _product_path(name: str) -> Path:
    return get_products_dir() / f"{name}.json"


def list_products() -> list[str]:
    """Return all saved product names, sorted alphabetically."""
    return sorted(p.stem for p in get_products_dir().glob("*.json") if p.is_file())


def load_product(name: str) -> ProductProfile:
    """Load and validate a product profile from disk.

    Raises:
        ConfigError: If the product does not exist or its file is invalid.
    """
    path = _product_path(name)
    if not path.is_file():
        raise ConfigError(f"Product '{name}' not found at {path}")
    data = _read_json(path, f"product '{name}'")
    try:
        return ProductProfile.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid product '{name}' at {path}: {exc}") from exc


def save_product(product: ProductProfile) -> None:
    """Persist a product profile atomically; the file name is ``product.name``."""
    data = product.model_dump(mode="json")
    _atomic_write(_product_path(product.name), json.dumps(data, indent=2) + "\n")


def delete_product(name: str) -> None:
    """Delete a product profile.

    Raises:
        ConfigError: If the product does not exist.
    """
    path = _product_path(name)
    if not path.is_file():
        raise ConfigError(f"Product '{name}' not found at {path}")
    path.unlink()


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./adminlens.json``.

    Typically pins ``default_product`` and engine overrides for a
    repository.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file is not a valid JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    data = _read_json(path, "project config")
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected an object")
    return data


# --- Precedence resolution ---


def resolve_config(
    cli_product: Optional[str] = None,
    cli_base_url: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> tuple[GlobalConfig, Optional[ProductProfile]]:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_product``, ``cli_base_url``, ``cli_format``)
        2. Environment variables (``ADMINLENS_PRODUCT``,
           ``ADMINLENS_BASE_URL``, ``ADMINLENS_SAMPLE_SIZE``)
        3. Project config (``./adminlens.json``)
        4. User config (``~/.config/adminlens/config.json``)
        5. Defaults

    Returns:
        A tuple of ``(global_config, active_product_or_None)``.

    Raises:
        ConfigError: If a config file is invalid, a named product does not
            exist, or ``ADMINLENS_SAMPLE_SIZE`` is not a positive integer.
    """
    global_cfg = load_global_config()

    project = load_project_config()
    if project is not None:
        merged = global_cfg.model_dump(mode="json")
        for key, value in project.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = {**merged[key], **value}
            else:
                merged[key] = value
        try:
            global_cfg = GlobalConfig.model_validate(merged)
        except ValueError as exc:
            raise ConfigError(f"Invalid project config: {exc}") from exc

    env_sample = os.environ.get(ENV_SAMPLE_SIZE)
    if env_sample:
        try:
            sample_size = int(env_sample)
        except ValueError:
            sample_size = 0
        if sample_size <= 0:
            raise ConfigError(
                f"{ENV_SAMPLE_SIZE} must be a positive integer, got {env_sample!r}"
            )
        global_cfg.engine = global_cfg.engine.model_copy(
            update={"field_sample_size": sample_size}
        )

    product_name = global_cfg.default_product
    env_product = os.environ.get(ENV_PRODUCT)
    if env_product:
        product_name = env_product
    if cli_product is not None:
        product_name = cli_product

    product: Optional[ProductProfile] = None
    if product_name is not None:
        product = load_product(product_name)

        env_base_url = os.environ.get(ENV_BASE_URL)
        if cli_base_url is not None:
            product.base_url = cli_base_url
        elif env_base_url:
            product.base_url = env_base_url

    if cli_format is not None:
        global_cfg.output.format = cli_format

    return global_cfg, product
