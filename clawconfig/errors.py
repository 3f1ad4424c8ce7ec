"""
Exceptions for clawconfig.

Only InstanceNotFoundError is meant to reach callers of the top-level
build entry points. Everything else is either raised at construction
time (bad settings, bad snapshot data) or caught and logged inside the
pipeline so the build degrades into a smaller, still-valid bundle.
"""

from __future__ import annotations


class ClawConfigError(Exception):
    """Base exception for configuration synthesis errors."""

    def __init__(self, message: str, *, component: str = "clawconfig"):
        super().__init__(message)
        self.component = component

    def __str__(self) -> str:
        return f"[{self.component}] {self.args[0]}"


class InstanceNotFoundError(ClawConfigError):
    """Raised when the instance id does not resolve to a record."""

    def __init__(self, instance_id: str):
        super().__init__(f"Instance not found: {instance_id}", component="loader")
        self.instance_id = instance_id


class LoaderError(ClawConfigError):
    """Raised when the relation loader fails for reasons other than not-found."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message, component="loader")
        self.status_code = status_code


class SnapshotIntegrityError(ClawConfigError):
    """Raised when loaded instance data violates a snapshot invariant."""

    def __init__(self, message: str):
        super().__init__(message, component="snapshot")


class DecryptionError(ClawConfigError):
    """Raised by a decryptor when a credential cannot be decrypted."""

    def __init__(self, message: str):
        super().__init__(message, component="encryption")


class ConfigurationError(ClawConfigError):
    """Raised when settings are missing or malformed."""

    def __init__(self, message: str):
        super().__init__(message, component="settings")
