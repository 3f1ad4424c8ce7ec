"""
clawconfig - configuration synthesis for hosted OpenClaw instances.

Given the stored state of a hosted agent instance (AI model, enabled
integrations, enabled skills), clawconfig deterministically produces:

- **Runtime config**: openclaw.json for the gateway, including MCP
  tool-server registrations with `${VAR}` env placeholders
- **Workspace files**: SOUL.md / USER.md / PROXY.md markdown for the
  agent's prompt context
- **Startup script**: the POSIX shell program the container boots with
- **Env vars**: decrypted MCP tokens under their canonical names

Quick Start:
    >>> from clawconfig import ConfigBuilder, FileInstanceLoader, TokenCipher
    >>> from clawconfig.config import get_settings
    >>>
    >>> builder = ConfigBuilder(
    ...     loader=FileInstanceLoader("instances/"),
    ...     decryptor=TokenCipher.from_settings(get_settings()),
    ... )
    >>> output = await builder.build_full_config("inst_123")
    >>> output.startup_script
"""

__version__ = "0.1.0"
__license__ = "MIT"

from clawconfig.errors import (
    ClawConfigError,
    ConfigurationError,
    DecryptionError,
    InstanceNotFoundError,
    LoaderError,
    SnapshotIntegrityError,
)
from clawconfig.runtime import (
    ApiInstanceLoader,
    ConfigBuilder,
    ConfigBuilderOutput,
    FileInstanceLoader,
    MemoryInstanceLoader,
)
from clawconfig.schemas import InstanceSnapshot, IntegrationMethod, RuntimeConfig
from clawconfig.secrets import ResolvedSecrets, TokenCipher, TokenResolver

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Orchestration
    "ConfigBuilder",
    "ConfigBuilderOutput",
    "ApiInstanceLoader",
    "FileInstanceLoader",
    "MemoryInstanceLoader",
    # Data
    "InstanceSnapshot",
    "IntegrationMethod",
    "RuntimeConfig",
    # Secrets
    "ResolvedSecrets",
    "TokenCipher",
    "TokenResolver",
    # Errors
    "ClawConfigError",
    "ConfigurationError",
    "DecryptionError",
    "InstanceNotFoundError",
    "LoaderError",
    "SnapshotIntegrityError",
]
