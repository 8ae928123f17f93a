"""Configuration system for DazzleStore.

This module defines how users tune the stores: pacing of remote calls,
JSON serialization, filesystem roots and how deep tree walks go.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union


DEFAULT_AIRTABLE_URL = "https://api.airtable.com/v0"
AIRTABLE_TOKEN_VARIABLE = "AIRTABLE_API_KEY"


@dataclass
class RateLimitConfig:
    """Configuration for the fixed-window rate limiter.

    At most ``capacity`` admissions are granted in each window of
    ``window_seconds``.
    """

    window_seconds: float = 1.0
    capacity: int = 5

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if self.window_seconds <= 0:
            errors.append(f"window_seconds must be positive, got {self.window_seconds}")

        if self.capacity < 1:
            errors.append(f"capacity must be at least 1, got {self.capacity}")

        return errors


@dataclass
class JsonStoreConfig:
    """How a JSON store serializes its document."""

    pretty: bool = False  # Indent output instead of compact form
    indent: int = 2       # Only used when pretty
    sort_keys: bool = False

    def validate(self) -> List[str]:
        errors = []
        if self.indent < 0:
            errors.append(f"indent cannot be negative, got {self.indent}")
        return errors

    def dumps_kwargs(self) -> dict:
        """Keyword arguments for ``json.dumps``."""
        if self.pretty:
            return {'indent': self.indent, 'sort_keys': self.sort_keys}
        return {'separators': (',', ':'), 'sort_keys': self.sort_keys}


@dataclass
class FileSystemConfig:
    """Configuration for a filesystem store rooted at ``base_directory``."""

    base_directory: Union[str, Path] = "."
    encoding: str = "utf-8"
    create_parents: bool = True  # Create missing directories on write

    def __post_init__(self):
        self.base_directory = Path(self.base_directory)

    def validate(self) -> List[str]:
        errors = []

        if not self.encoding:
            errors.append("encoding cannot be empty")

        if self.base_directory.exists() and not self.base_directory.is_dir():
            errors.append(f"base_directory is not a directory: {self.base_directory}")

        return errors


@dataclass
class AirtableConfig:
    """Configuration for the Airtable REST store.

    Airtable accepts at most 10 records per create request and 5 requests
    per second per base, which are the defaults here.
    """

    token: str = ""
    base_url: str = DEFAULT_AIRTABLE_URL
    batch_size: int = 10
    timeout_seconds: float = 30.0
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not self.token:
            errors.append("token is required")

        if not self.base_url.startswith(("http://", "https://")):
            errors.append(f"base_url must be an http(s) URL, got {self.base_url!r}")

        if not 1 <= self.batch_size <= 10:
            errors.append(f"batch_size must be between 1 and 10, got {self.batch_size}")

        if self.timeout_seconds <= 0:
            errors.append(f"timeout_seconds must be positive, got {self.timeout_seconds}")

        errors.extend(self.rate_limit.validate())

        return errors

    @classmethod
    def from_env(cls, var: str = AIRTABLE_TOKEN_VARIABLE, **kwargs) -> 'AirtableConfig':
        """Create config with the token read from an environment variable.

        Args:
            var: Name of the environment variable holding the token
            **kwargs: Other fields to override

        Raises:
            KeyError: If the variable is not set
        """
        return cls(token=os.environ[var], **kwargs)


@dataclass
class WalkConfig:
    """Configuration for recursive tree walks."""

    max_depth: Optional[int] = None  # None walks everything; 1 = children only

    def validate(self) -> List[str]:
        errors = []
        if self.max_depth is not None and self.max_depth < 0:
            errors.append(f"max_depth cannot be negative, got {self.max_depth}")
        return errors

    def should_expand(self, depth: int) -> bool:
        """Check whether a branch at ``depth`` has its children listed.

        Args:
            depth: Depth of the branch (children of the start are depth 1)

        Returns:
            True if the walk goes below this branch
        """
        return self.max_depth is None or depth < self.max_depth


def ensure_valid(config) -> None:
    """Raise ValueError listing every problem reported by ``config.validate()``."""
    errors = config.validate()
    if errors:
        raise ValueError(f"Invalid configuration: {'; '.join(errors)}")
