from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple
import logging
import os

import yaml

from ..ci.teamcity import TeamCityProperties, normalize_server_url, split_artifact_paths
from ..engine.compare import PAIRINGS
from ..engine.hashing import DEFAULT_ALGORITHM, validate_algorithm
from ..errors import ConfigError

logger = logging.getLogger(__name__)

# Build selector understood by the server as "latest successful build".
LAST_SUCCESSFUL = ".lastSuccessful"
PREVIOUS_VERSION_ENV = "PreviousVersion"

OPTION_KEYS = (
    "algorithm",
    "artifact_paths",
    "build_config_id",
    "pairing",
    "password",
    "previous_version",
    "server_url",
    "timeout_s",
    "username",
    "verbose",
    "workers",
)


@dataclass(frozen=True)
class Settings:
    """Everything one run needs, resolved once at startup."""

    server_url: str = ""
    build_config_id: str = ""
    username: str = ""
    password: str = field(default="", repr=False)
    artifact_paths: Tuple[str, ...] = ()
    previous_version: str = LAST_SUCCESSFUL
    verbose: bool = True
    pairing: str = "positional"
    algorithm: str = DEFAULT_ALGORITHM
    workers: int = 1
    timeout_s: Optional[float] = None


# ---- small helpers --------------------------------------------------------

def _coerce_bool(key: str, v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        s = v.strip().lower()
        if s in {"1", "true", "yes", "on"}:
            return True
        if s in {"0", "false", "no", "off"}:
            return False
    raise ConfigError(f"{key}: expected a boolean, got {v!r}")


def _coerce_str(key: str, v: Any) -> str:
    if isinstance(v, (str, int, float)) and not isinstance(v, bool):
        return str(v)
    raise ConfigError(f"{key}: expected a string, got {v!r}")


def _coerce_paths(v: Any) -> Tuple[str, ...]:
    if isinstance(v, str):
        return tuple(split_artifact_paths(v))
    if isinstance(v, (list, tuple)) and all(isinstance(x, str) for x in v):
        return tuple(x for x in v if x.strip())
    raise ConfigError(f"artifact_paths: expected a list of strings, got {v!r}")


def validate_options(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate and normalize an options mapping; returns a new dict.

    Raises ConfigError naming the offending key on unknown keys or bad values.
    """
    unknown = sorted(k for k in data if k not in OPTION_KEYS)
    if unknown:
        raise ConfigError(f"unknown option(s): {', '.join(map(str, unknown))}")

    out: Dict[str, Any] = {}
    for k, v in data.items():
        if v is None:
            continue
        if k == "verbose":
            out[k] = _coerce_bool(k, v)
        elif k == "pairing":
            s = _coerce_str(k, v).strip().lower()
            if s not in PAIRINGS:
                raise ConfigError(f"pairing: expected one of {', '.join(PAIRINGS)}, got {v!r}")
            out[k] = s
        elif k == "algorithm":
            out[k] = validate_algorithm(_coerce_str(k, v))
        elif k == "workers":
            if isinstance(v, bool) or not isinstance(v, int) or v < 1:
                raise ConfigError(f"workers: expected an integer >= 1, got {v!r}")
            out[k] = v
        elif k == "timeout_s":
            if isinstance(v, bool) or not isinstance(v, (int, float)) or v <= 0:
                raise ConfigError(f"timeout_s: expected a positive number, got {v!r}")
            out[k] = float(v)
        elif k == "artifact_paths":
            out[k] = _coerce_paths(v)
        else:
            out[k] = _coerce_str(k, v)
    return out


# ---- loaders --------------------------------------------------------------

def load_options(path: str | os.PathLike[str] | None = None) -> Dict[str, Any]:
    """Load the YAML options file; a missing path or file yields no options."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Options file not found: '%s'", path)
        return {}
    except yaml.YAMLError as e:
        raise ConfigError(f"cannot parse options file '{path}': {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"options file '{path}' must contain a mapping at top level")
    return validate_options(data)


def load_settings(
    config_path: str | os.PathLike[str] | None = None,
    env: Optional[Mapping[str, str]] = None,
    teamcity: Optional[TeamCityProperties] = None,
) -> Settings:
    """
    Resolve Settings for one run.
    Precedence per value:
      * TeamCity property files (server, build config, credentials, artifact paths).
      * The YAML options file fills in whatever TeamCity did not provide.
      * $PreviousVersion overrides the build selector; default is ".lastSuccessful".
    Missing values are logged, not raised; a later step fails instead.
    """
    env = os.environ if env is None else env
    opts = load_options(config_path)
    tc = teamcity if teamcity is not None else TeamCityProperties.load(env)

    server = tc.server_url()
    if not server and opts.get("server_url"):
        server = normalize_server_url(opts["server_url"])
    if not server:
        logger.warning("Server URL is not configured.")

    build_config = tc.build_config_id() or opts.get("build_config_id", "")
    if not build_config:
        logger.warning("Build configuration id is not configured.")

    username, password = tc.credentials()
    if username is None:
        username = opts.get("username", "")
    if password is None:
        password = opts.get("password", "")

    paths = tuple(tc.artifact_paths()) or tuple(opts.get("artifact_paths", ()))
    if not paths:
        logger.warning("No artifact paths configured.")

    previous_version = env.get(PREVIOUS_VERSION_ENV) or opts.get("previous_version") or LAST_SUCCESSFUL

    return Settings(
        server_url=server or "",
        build_config_id=build_config,
        username=username,
        password=password,
        artifact_paths=paths,
        previous_version=previous_version,
        verbose=opts.get("verbose", True),
        pairing=opts.get("pairing", "positional"),
        algorithm=opts.get("algorithm", DEFAULT_ALGORITHM),
        workers=opts.get("workers", 1),
        timeout_s=opts.get("timeout_s"),
    )
