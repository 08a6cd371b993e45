"""Configuration data models"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Optional, Any

from ..constants import (
    DEFAULT_DOCKER_TIMEOUT,
    DEFAULT_LOAD_TIMEOUT,
    DEFAULT_PULL_TIMEOUT,
    DEFAULT_PUSH_TIMEOUT,
    DEFAULT_REGISTRY_SCHEME,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SAVE_TIMEOUT,
    DEFAULT_SIGNAL_MAX_ATTEMPTS,
    DEFAULT_SIGNAL_POLL_INTERVAL,
    DEFAULT_TAR_COMMAND,
    ENV_DOCKER_HOST,
    ENV_HOME,
    ENV_LOG_LEVEL,
    ENV_PULL_TIMEOUT,
    ENV_PUSH_TIMEOUT,
    ENV_SIGNAL_ATTEMPTS,
    ENV_SIGNAL_INTERVAL,
    ENV_TAR_COMMAND,
)


@dataclass
class DockerConfig:
    """Connection settings for the image runtime"""

    base_url: Optional[str] = None
    version: str = "auto"
    timeout: int = DEFAULT_DOCKER_TIMEOUT

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "base_url": self.base_url,
            "version": self.version,
            "timeout": self.timeout,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DockerConfig':
        """Create from dictionary"""
        return cls(
            base_url=data.get("base_url"),
            version=str(data.get("version", "auto")),
            timeout=int(data.get("timeout", DEFAULT_DOCKER_TIMEOUT)),
        )


@dataclass
class TimeoutConfig:
    """Image transfer timeouts in minutes"""

    pull: int = DEFAULT_PULL_TIMEOUT
    push: int = DEFAULT_PUSH_TIMEOUT
    save: int = DEFAULT_SAVE_TIMEOUT
    load: int = DEFAULT_LOAD_TIMEOUT

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TimeoutConfig':
        """Create from dictionary"""
        defaults = cls()
        return cls(**{
            f.name: int(data.get(f.name, getattr(defaults, f.name)))
            for f in fields(cls)
        })


@dataclass
class SignalConfig:
    """Manifest-dependency signal wait settings"""

    poll_interval: float = DEFAULT_SIGNAL_POLL_INTERVAL
    max_attempts: int = DEFAULT_SIGNAL_MAX_ATTEMPTS

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "poll_interval": self.poll_interval,
            "max_attempts": self.max_attempts,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SignalConfig':
        """Create from dictionary"""
        return cls(
            poll_interval=float(data.get("poll_interval", DEFAULT_SIGNAL_POLL_INTERVAL)),
            max_attempts=int(data.get("max_attempts", DEFAULT_SIGNAL_MAX_ATTEMPTS)),
        )


@dataclass
class RegistryConfig:
    """Trusted registry settings"""

    scheme: str = DEFAULT_REGISTRY_SCHEME
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT
    verify_tls: bool = True
    trusted_push: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "scheme": self.scheme,
            "request_timeout": self.request_timeout,
            "verify_tls": self.verify_tls,
            "trusted_push": self.trusted_push,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RegistryConfig':
        """Create from dictionary"""
        return cls(
            scheme=data.get("scheme", DEFAULT_REGISTRY_SCHEME),
            request_timeout=int(data.get("request_timeout", DEFAULT_REQUEST_TIMEOUT)),
            verify_tls=bool(data.get("verify_tls", True)),
            trusted_push=bool(data.get("trusted_push", False)),
        )


@dataclass
class PackagerConfig:
    """Top-level app-packager configuration"""

    home_path: Path = field(default_factory=lambda: Path.cwd())
    mode: str = "offline"
    tar_command: str = DEFAULT_TAR_COMMAND
    log_level: str = "WARNING"
    docker: DockerConfig = field(default_factory=DockerConfig)
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    signal: SignalConfig = field(default_factory=SignalConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)

    def __post_init__(self):
        """Post-initialization processing"""
        if isinstance(self.home_path, str):
            self.home_path = Path(self.home_path).expanduser()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "home_path": str(self.home_path),
            "mode": self.mode,
            "tar_command": self.tar_command,
            "log_level": self.log_level,
            "docker": self.docker.to_dict(),
            "timeouts": self.timeouts.to_dict(),
            "signal": self.signal.to_dict(),
            "registry": self.registry.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PackagerConfig':
        """Create from dictionary"""
        data = data or {}
        return cls(
            home_path=data.get("home_path") or Path.cwd(),
            mode=data.get("mode", "offline"),
            tar_command=data.get("tar_command", DEFAULT_TAR_COMMAND),
            log_level=data.get("log_level", "WARNING"),
            docker=DockerConfig.from_dict(data.get("docker") or {}),
            timeouts=TimeoutConfig.from_dict(data.get("timeouts") or {}),
            signal=SignalConfig.from_dict(data.get("signal") or {}),
            registry=RegistryConfig.from_dict(data.get("registry") or {}),
        )

    def apply_env(self, environ: Optional[Dict[str, str]] = None) -> 'PackagerConfig':
        """Override fields from environment variables

        Args:
            environ: Environment mapping (defaults to os.environ)

        Returns:
            self, for chaining
        """
        env = os.environ if environ is None else environ

        if env.get(ENV_HOME):
            self.home_path = Path(env[ENV_HOME]).expanduser()
        if env.get(ENV_DOCKER_HOST):
            self.docker.base_url = env[ENV_DOCKER_HOST]
        if env.get(ENV_LOG_LEVEL):
            self.log_level = env[ENV_LOG_LEVEL].upper()
        if env.get(ENV_PULL_TIMEOUT):
            self.timeouts.pull = int(env[ENV_PULL_TIMEOUT])
        if env.get(ENV_PUSH_TIMEOUT):
            self.timeouts.push = int(env[ENV_PUSH_TIMEOUT])
        if env.get(ENV_SIGNAL_ATTEMPTS):
            self.signal.max_attempts = int(env[ENV_SIGNAL_ATTEMPTS])
        if env.get(ENV_SIGNAL_INTERVAL):
            self.signal.poll_interval = float(env[ENV_SIGNAL_INTERVAL])
        if env.get(ENV_TAR_COMMAND):
            self.tar_command = env[ENV_TAR_COMMAND]

        return self
