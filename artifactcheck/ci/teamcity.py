"""TeamCity build-agent properties.

A running build exposes three property files: the build properties file (named
by $TEAMCITY_BUILD_PROPERTIES_FILE) which points at the configuration and
runner property files. Each is read once; absent files or pointers are logged
and produce empty maps rather than errors.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from .properties import read_properties

logger = logging.getLogger(__name__)

BUILD_PROPERTIES_ENV = "TEAMCITY_BUILD_PROPERTIES_FILE"
CONFIG_POINTER = "teamcity.configuration.properties.file"
RUNNER_POINTER = "teamcity.runner.properties.file"

KEY_SERVER_URL = "teamcity.serverUrl"
KEY_BUILD_TYPE = "teamcity.buildType.id"
KEY_USER = "teamcity.auth.userId"
KEY_PASSWORD = "teamcity.auth.password"
KEY_ARTIFACT_PATHS = "artefacts.paths"

__all__ = [
    "BUILD_PROPERTIES_ENV",
    "TeamCityProperties",
    "normalize_server_url",
    "split_artifact_paths",
]


def _read_optional(path: Optional[str], what: str) -> Dict[str, str]:
    if not path:
        logger.warning("Couldn't find Teamcity %s properties file.", what)
        return {}
    if not os.path.isfile(path):
        logger.warning("Couldn't find Teamcity %s properties file: '%s'", what, path)
        return {}
    logger.info("Reading Teamcity %s properties file: '%s'", what, path)
    return read_properties(path)


def normalize_server_url(server: Optional[str]) -> str:
    """Prefix https:// when no scheme is given; drop trailing slashes."""
    s = (server or "").strip()
    if not s.startswith("http://") and not s.startswith("https://"):
        s = f"https://{s}"
    return s.rstrip("/")


def split_artifact_paths(raw: Optional[str]) -> List[str]:
    return [ln for ln in (raw or "").replace("\r", "\n").split("\n") if ln.strip()]


@dataclass
class TeamCityProperties:
    build: Dict[str, str] = field(default_factory=dict)
    config: Dict[str, str] = field(default_factory=dict)
    runner: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def load(cls, env: Optional[Mapping[str, str]] = None) -> "TeamCityProperties":
        env = os.environ if env is None else env
        build = _read_optional(env.get(BUILD_PROPERTIES_ENV), "build")
        if not build:
            return cls(build, {}, {})
        config = _read_optional(build.get(CONFIG_POINTER), "config")
        runner = _read_optional(build.get(RUNNER_POINTER), "runner")
        return cls(build, config, runner)

    def server_url(self) -> Optional[str]:
        server = self.config.get(KEY_SERVER_URL)
        if server:
            logger.info("Got server from Teamcity: '%s'", server)
            return normalize_server_url(server)
        return None

    def build_config_id(self) -> Optional[str]:
        build_config = self.build.get(KEY_BUILD_TYPE)
        if build_config:
            logger.info("Got build config from Teamcity: '%s'", build_config)
        return build_config or None

    def credentials(self) -> Tuple[Optional[str], Optional[str]]:
        username = self.build.get(KEY_USER)
        password = self.build.get(KEY_PASSWORD)
        if username is not None:
            logger.info("Got username from Teamcity.")
        if password is not None:
            logger.info("Got password from Teamcity.")
        return username, password

    def artifact_paths(self) -> List[str]:
        if KEY_ARTIFACT_PATHS not in self.runner:
            return []
        paths = split_artifact_paths(self.runner[KEY_ARTIFACT_PATHS])
        for p in paths:
            logger.info("Got artifact path from Teamcity: '%s'", p)
        return paths
