"""
clawconfig Schemas.

Pydantic models for the two structured ends of the pipeline:

- snapshot: the instance record as loaded from the control plane
- openclaw: the runtime configuration handed to the remote gateway
"""

from clawconfig.schemas.openclaw import (
    AgentConfig,
    ChannelsConfig,
    ConfigMeta,
    GatewayConfig,
    McpConfig,
    McpServerConfig,
    PluginEntry,
    PluginsConfig,
    RuntimeConfig,
    TelegramChannelConfig,
)
from clawconfig.schemas.snapshot import (
    EnabledIntegration,
    EnabledSkill,
    InstanceSnapshot,
    InstanceUser,
    IntegrationDefinition,
    IntegrationMethod,
    McpServerDescriptor,
    SkillDefinition,
    UserIntegration,
)

__all__ = [
    # Snapshot
    "EnabledIntegration",
    "EnabledSkill",
    "InstanceSnapshot",
    "InstanceUser",
    "IntegrationDefinition",
    "IntegrationMethod",
    "McpServerDescriptor",
    "SkillDefinition",
    "UserIntegration",
    # Runtime config
    "AgentConfig",
    "ChannelsConfig",
    "ConfigMeta",
    "GatewayConfig",
    "McpConfig",
    "McpServerConfig",
    "PluginEntry",
    "PluginsConfig",
    "RuntimeConfig",
    "TelegramChannelConfig",
]
