"""
OpenClaw Runtime Configuration Schema.

The structured configuration the remote gateway reads from
`~/.openclaw/openclaw.json`. Field names and the `${VAR}` placeholder
convention in `mcp.servers.*.env` are a wire contract with the gateway's
MCP client; serialize with `to_wire()` (camelCase, optional sections
omitted rather than emitted empty).

Example:
    {
        "meta": {"generatedBy": "fasterclaw", "generatedAt": "...", "instanceId": "inst_1"},
        "agent": {"model": "anthropic/claude-sonnet-4-0"},
        "gateway": {"mode": "local"},
        "channels": {"telegram": {"enabled": true, "dmPolicy": "open", "allowFrom": ["*"]}},
        "mcp": {"servers": {"github": {"command": "npx", "args": ["-y", "..."],
                                       "env": {"GITHUB_TOKEN": "${GITHUB_TOKEN}"}}}},
        "plugins": {"entries": {"telegram": {"enabled": true}}}
    }
"""

from __future__ import annotations

import base64
import json
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for immutable camelCase wire models."""

    class Config:
        frozen = True
        populate_by_name = True
        alias_generator = to_camel

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON-compatible shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ConfigMeta(WireModel):
    generated_by: str
    generated_at: datetime
    instance_id: str


class AgentConfig(WireModel):
    model: str


class GatewayConfig(WireModel):
    mode: Literal["local", "remote"] = "local"


class TelegramChannelConfig(WireModel):
    enabled: bool = True
    dm_policy: Literal["open", "pairing"] = "open"
    allow_from: tuple[str, ...] = ("*",)


class ChannelsConfig(WireModel):
    """Messaging-channel policy. Every instance currently has exactly one channel."""

    telegram: TelegramChannelConfig | None = Field(default_factory=TelegramChannelConfig)


class McpServerConfig(WireModel):
    """One tool-server registration."""

    command: str
    args: tuple[str, ...]
    env: dict[str, str] | None = None


class McpConfig(WireModel):
    servers: dict[str, McpServerConfig]


class PluginEntry(WireModel):
    enabled: bool = True


class PluginsConfig(WireModel):
    entries: dict[str, PluginEntry] = Field(
        default_factory=lambda: {"telegram": PluginEntry(enabled=True)}
    )


class RuntimeConfig(WireModel):
    """
    Complete gateway configuration for one instance.

    Re-derived from the snapshot on every build; never cached.
    """

    meta: ConfigMeta
    agent: AgentConfig
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    channels: ChannelsConfig = Field(default_factory=ChannelsConfig)
    mcp: McpConfig | None = None
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    def to_json(self, *, indent: int | None = 2) -> str:
        return json.dumps(self.to_wire(), indent=indent)

    def to_base64(self) -> str:
        """Value for the OPENCLAW_CONFIG_B64 container variable."""
        return base64.b64encode(self.to_json(indent=None).encode("utf-8")).decode("ascii")
