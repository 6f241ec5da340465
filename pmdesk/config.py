"""
PM Desk - Configuration
=======================
Loads from ~/.config/pmdesk/config.yaml (or $PMDESK_CONFIG) with env var overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
from dotenv import find_dotenv, load_dotenv

# Load .env from the working directory (before any os.environ access)
load_dotenv(find_dotenv(usecwd=True))

# Paths
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "pmdesk" / "config.yaml"


def config_path() -> Path:
    if p := os.environ.get("PMDESK_CONFIG"):
        return Path(p).expanduser()
    return DEFAULT_CONFIG_PATH


@dataclass
class InvocationConfig:
    """CLI agent invocation limits."""

    timeout_sec: float = 120.0  # wall-clock budget per question
    probe_timeout_sec: float = 5.0  # per `which`/`where` lookup


@dataclass
class ProjectsConfig:
    """Where the active project comes from."""

    db_path: str = ""  # SQLite file with a `projects` table; empty = none


@dataclass
class ServerConfig:
    """Web server configuration."""

    host: str = "127.0.0.1"
    port: int = 8091


@dataclass
class LoggingConfig:
    level: str = "WARNING"


@dataclass
class PMDeskConfig:
    """Root configuration object."""

    invocation: InvocationConfig = field(default_factory=InvocationConfig)
    projects: ProjectsConfig = field(default_factory=ProjectsConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_SECTIONS = ("invocation", "projects", "server", "logging")


def _apply_section(obj, raw: dict):
    """Apply dict values to a dataclass."""
    for k, v in raw.items():
        if hasattr(obj, k):
            setattr(obj, k, v)


def _validate(cfg: PMDeskConfig) -> PMDeskConfig:
    try:
        cfg.invocation.timeout_sec = float(cfg.invocation.timeout_sec)
        cfg.invocation.probe_timeout_sec = float(cfg.invocation.probe_timeout_sec)
        cfg.server.port = int(cfg.server.port)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid configuration value: {e}") from e
    if cfg.invocation.timeout_sec <= 0:
        raise ValueError("invocation.timeout_sec must be > 0")
    if cfg.invocation.probe_timeout_sec <= 0:
        raise ValueError("invocation.probe_timeout_sec must be > 0")
    return cfg


def load_config(path: Optional[Path] = None) -> PMDeskConfig:
    """Load config from YAML + env vars."""
    cfg = PMDeskConfig()
    path = path or config_path()

    if path.exists():
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"{path}: expected a mapping at top level")
        for section in _SECTIONS:
            if isinstance(raw.get(section), dict):
                _apply_section(getattr(cfg, section), raw[section])

    # Env overrides
    if t := os.environ.get("PMDESK_TIMEOUT"):
        cfg.invocation.timeout_sec = t
    if db := os.environ.get("PMDESK_DB"):
        cfg.projects.db_path = db
    if h := os.environ.get("PMDESK_HOST"):
        cfg.server.host = h
    if p := os.environ.get("PMDESK_PORT"):
        cfg.server.port = p
    if lvl := os.environ.get("LOG_LEVEL"):
        cfg.logging.level = lvl

    return _validate(cfg)


_config: Optional[PMDeskConfig] = None


def get_config() -> PMDeskConfig:
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Drop the cached singleton so the next get_config() reloads."""
    global _config
    _config = None
