"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for fedlogin:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.fedlogin/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_data_dir`, :func:`get_profiles_dir`.
* **Global config** -- A single :class:`~fedlogin.models.GlobalConfig`
  JSON file storing defaults (output format, headless browser, default
  profile).
* **Profiles** -- One JSON file per tenant/user pairing, each deserialised
  into a :class:`~fedlogin.models.Profile`.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective profile.

Only configuration is written to disk. Tokens, codes and cookies live in
the per-attempt :class:`~fedlogin.session.Session` and are never persisted.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from fedlogin.exceptions import ConfigError, InvalidUsageError
from fedlogin.models import AuthMode, CaptureStrategy, GlobalConfig, Profile

_APP_NAME = "fedlogin"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "fedlogin.json"

ENV_PROFILE = "FEDLOGIN_PROFILE"
ENV_TENANT = "FEDLOGIN_TENANT"
ENV_USER = "FEDLOGIN_USER"
ENV_MODE = "FEDLOGIN_MODE"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform uses the XDG Base Directory layout (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/fedlogin/`` (default ``~/.config/fedlogin/``).
    On macOS/Windows: ``~/.fedlogin/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory used for crash logs, creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/fedlogin/`` (default ``~/.local/share/fedlogin/``).
    On macOS/Windows: ``~/.fedlogin/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_profiles_dir() -> Path:
    """Return the profiles directory (``<config_dir>/profiles/``), creating it if necessary."""
    path = get_config_dir() / "profiles"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file lives in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems.
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
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid {what} at {path}: {exc}") from exc


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration, returning defaults when the file is absent.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
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


# --- Profiles ---


def _profile_path(name: str) -> Path:
    return get_profiles_dir() / f"{name}.json"


def list_profiles() -> list[str]:
    """Return all profile names found in the profiles directory, sorted alphabetically."""
    return sorted(p.stem for p in get_profiles_dir().glob("*.json") if p.is_file())


def load_profile(name: str) -> Profile:
    """Load and validate a profile from disk.

    Raises:
        ConfigError: If the profile file does not exist, contains invalid
            JSON, or fails Pydantic validation.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    data = _read_json(path, f"profile '{name}'")
    try:
        return Profile.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid profile '{name}' at {path}: {exc}") from exc


def save_profile(profile: Profile) -> None:
    """Persist a profile atomically; the file name is derived from ``profile.name``."""
    data = profile.model_dump(mode="json")
    _atomic_write(_profile_path(profile.name), json.dumps(data, indent=2) + "\n")


def delete_profile(name: str) -> None:
    """Delete a profile's JSON file from disk.

    Raises:
        ConfigError: If the profile does not exist.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    path.unlink()


def profile_exists(name: str) -> bool:
    return _profile_path(name).is_file()


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./fedlogin.json``, if present.

    Raises:
        ConfigError: If the file exists but contains invalid JSON.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    data = _read_json(path, "project config")
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def parse_mode(value: str) -> AuthMode:
    """Turn ``oidc`` / ``SAML`` (any case) into an :class:`AuthMode`.

    Raises:
        InvalidUsageError: For anything other than OIDC or SAML.
    """
    try:
        return AuthMode(value.strip().upper())
    except ValueError:
        raise InvalidUsageError(f"Unknown mode '{value}'. Expected OIDC or SAML.") from None


def parse_capture(value: str) -> CaptureStrategy:
    """Turn ``interception`` / ``cookie-scan`` into a :class:`CaptureStrategy`."""
    try:
        return CaptureStrategy(value.strip().lower().replace("-", "_"))
    except ValueError:
        choices = ", ".join(s.value for s in CaptureStrategy)
        raise InvalidUsageError(f"Unknown capture strategy '{value}'. Expected one of: {choices}.") from None


def resolve_config(
    cli_profile: Optional[str] = None,
    cli_tenant: Optional[str] = None,
    cli_user: Optional[str] = None,
    cli_mode: Optional[str] = None,
    cli_capture: Optional[str] = None,
) -> tuple[GlobalConfig, Optional[Profile]]:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags
        2. Environment variables (``FEDLOGIN_PROFILE``, ``FEDLOGIN_TENANT``,
           ``FEDLOGIN_USER``, ``FEDLOGIN_MODE``)
        3. Project config (``./fedlogin.json``)
        4. User config (``~/.config/fedlogin/config.json``)
        5. Defaults

    When no stored profile is selected but a tenant is supplied through a
    flag or the environment, an unsaved ad-hoc profile named after the
    tenant is returned.

    Returns:
        A tuple of ``(global_config, active_profile_or_None)``.
    """
    global_cfg = load_global_config()

    project = load_project_config()
    project_profile_name: Optional[str] = None
    if project is not None:
        project_profile_name = project.get("default_profile")

    resolved_profile_name: Optional[str] = global_cfg.default_profile
    if project_profile_name is not None:
        resolved_profile_name = project_profile_name
    env_profile = os.environ.get(ENV_PROFILE)
    if env_profile:
        resolved_profile_name = env_profile
    if cli_profile is not None:
        resolved_profile_name = cli_profile

    tenant = cli_tenant or os.environ.get(ENV_TENANT) or None

    if resolved_profile_name is None and tenant is None and global_cfg.auto_select_single_profile:
        profiles = list_profiles()
        if len(profiles) == 1:
            resolved_profile_name = profiles[0]

    profile: Optional[Profile] = None
    if resolved_profile_name is not None:
        profile = load_profile(resolved_profile_name)
    elif tenant is not None:
        profile = Profile(name=tenant, tenant=tenant)

    if profile is not None:
        if tenant is not None:
            profile.tenant = tenant
        user = cli_user or os.environ.get(ENV_USER)
        if user:
            profile.user = user
        mode = cli_mode or os.environ.get(ENV_MODE)
        if mode:
            profile.mode = parse_mode(mode)
        if cli_capture:
            profile.capture = parse_capture(cli_capture)

    return global_cfg, profile
