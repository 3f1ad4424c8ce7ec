"""
clawconfig Runtime Layer.

Connects the instance store to the pure builders:
- Loaders: where snapshots come from (memory, JSON files, internal API)
- ConfigBuilder: load -> resolve tokens -> build artifacts

Usage:
    builder = ConfigBuilder(
        loader=FileInstanceLoader("instances/"),
        decryptor=TokenCipher.from_settings(get_settings()),
    )
    output = await builder.build_full_config("inst_123")
"""

from .config_builder import ConfigBuilder, ConfigBuilderOutput
from .loaders import (
    ApiInstanceLoader,
    FileInstanceLoader,
    InstanceLoader,
    MemoryInstanceLoader,
    parse_snapshot,
)

__all__ = [
    "ApiInstanceLoader",
    "ConfigBuilder",
    "ConfigBuilderOutput",
    "FileInstanceLoader",
    "InstanceLoader",
    "MemoryInstanceLoader",
    "parse_snapshot",
]
