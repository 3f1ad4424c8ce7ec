"""
Instance Snapshot Schema.

JSON-serializable, read-only view of one hosted instance together with
its user, enabled integrations and enabled skills. The relation loader
assembles it once per build; every builder downstream reads from it and
nothing writes to it.

Wire format:
    Field names follow the control-plane database (camelCase). Python
    code uses snake_case attributes; both spellings are accepted on input.

    snapshot = InstanceSnapshot.model_validate({
        "id": "inst_1",
        "userId": "user_1",
        "aiModel": "anthropic/claude-sonnet-4-0",
        "instanceIntegrations": [
            {
                "id": "ii_1",
                "userIntegrationId": "ui_1",
                "userIntegration": {
                    "id": "ui_1",
                    "userId": "user_1",
                    "encryptedAccessToken": "iv:tag:data",
                    "integration": {
                        "provider": "github",
                        "name": "GitHub",
                        "preferredMethod": "mcp",
                        "mcpServer": {
                            "npmPackage": "@modelcontextprotocol/server-github",
                            "requiredEnvVars": ["GITHUB_TOKEN"],
                        },
                    },
                },
            }
        ],
    })

Invariants:
    - Every integration credential belongs to the instance owner.
    - `preferredMethod` is a closed set.

    Integration entries are validated one at a time. An entry that breaks
    either rule, or is otherwise malformed, is dropped with a warning and
    the rest of the snapshot survives. Only a malformed instance-level
    record fails validation.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class IntegrationMethod(str, Enum):
    """How an integration is wired into the agent."""

    MCP = "mcp"  # tool-server process started alongside the gateway
    CLI = "cli"  # command-line tool already present in the image
    PROXY = "proxy"  # calls routed through the control plane


class SnapshotRecord(BaseModel):
    """Base for immutable, camelCase-aliased snapshot records."""

    class Config:
        frozen = True
        populate_by_name = True
        alias_generator = to_camel


class McpServerDescriptor(SnapshotRecord):
    """Tool-server package an `mcp` integration starts."""

    id: str = ""
    provider: str = ""
    name: str = ""
    npm_package: str = Field(..., description="npm package run via npx")
    version: str = "latest"
    required_env_vars: tuple[str, ...] = ()
    capabilities: tuple[str, ...] = ()


class IntegrationDefinition(SnapshotRecord):
    """Catalog entry for a third-party integration."""

    id: str = ""
    slug: str = ""
    name: str
    provider: str
    preferred_method: IntegrationMethod
    mcp_server_id: str | None = None
    mcp_server: McpServerDescriptor | None = None


class UserIntegration(SnapshotRecord):
    """A connected external account with its encrypted credential."""

    id: str
    user_id: str
    integration_id: str = ""
    encrypted_access_token: str
    encrypted_refresh_token: str | None = None
    token_expires_at: datetime | None = None
    account_identifier: str | None = None
    integration: IntegrationDefinition


class EnabledIntegration(SnapshotRecord):
    """An integration switched on for one instance."""

    id: str
    instance_id: str = ""
    user_integration_id: str
    enabled_at: datetime | None = None
    user_integration: UserIntegration

    @property
    def integration(self) -> IntegrationDefinition:
        return self.user_integration.integration

    @property
    def method(self) -> IntegrationMethod:
        return self.user_integration.integration.preferred_method

    @property
    def provider(self) -> str:
        return self.user_integration.integration.provider


class SkillDefinition(SnapshotRecord):
    """Skill catalog entry."""

    id: str = ""
    slug: str = ""
    name: str
    description: str = ""
    markdown_content: str = ""
    requires_bins: tuple[str, ...] = ()
    requires_env_vars: tuple[str, ...] = ()


class EnabledSkill(SnapshotRecord):
    """A skill switched on for one instance (loaded, not yet projected)."""

    id: str
    instance_id: str = ""
    skill_id: str = ""
    enabled_at: datetime | None = None
    skill: SkillDefinition


class InstanceUser(SnapshotRecord):
    """Identity of the instance owner."""

    id: str
    email: str
    name: str | None = None


def _entry_id(item: Any) -> Any:
    if isinstance(item, dict):
        return item.get("id")
    return getattr(item, "id", None)


class InstanceSnapshot(SnapshotRecord):
    """
    Everything the builders need to know about one instance.

    Attributes:
        id: Instance identifier
        user_id: Owning user
        name: Instance display name
        provider: Runtime provider the instance runs on (fly, docker)
        ai_model: Model selector in `provider/model` form
        status: Lifecycle status as stored by the control plane
        user: Owner identity, when the loader could resolve it
        instance_integrations: Enabled integrations, in stored order
        instance_skills: Enabled skills, in stored order
    """

    id: str
    user_id: str
    name: str = ""
    provider: str = "fly"
    ai_model: str
    status: str = ""
    user: InstanceUser | None = None
    instance_integrations: tuple[EnabledIntegration, ...] = ()
    instance_skills: tuple[EnabledSkill, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _screen_integrations(cls, data: Any) -> Any:
        """Drop integration entries that are malformed or not owned by the instance owner."""
        if not isinstance(data, dict):
            return data

        key = "instanceIntegrations" if "instanceIntegrations" in data else "instance_integrations"
        raw = data.get(key)
        if not isinstance(raw, (list, tuple)):
            return data

        instance_id = data.get("id")
        owner = data.get("userId", data.get("user_id"))
        kept: list[EnabledIntegration] = []

        for item in raw:
            try:
                ii = (
                    item
                    if isinstance(item, EnabledIntegration)
                    else EnabledIntegration.model_validate(item)
                )
            except ValidationError as e:
                fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
                logger.warning(
                    f"[snapshot] Skipping invalid integration | instance={instance_id} | "
                    f"entry={_entry_id(item)} | fields={fields}"
                )
                continue

            if ii.user_integration.user_id != owner:
                logger.warning(
                    f"[snapshot] Skipping integration not owned by instance owner | "
                    f"instance={instance_id} | user_integration={ii.user_integration.id} | "
                    f"owner={owner} | credential_owner={ii.user_integration.user_id}"
                )
                continue

            kept.append(ii)

        return {**data, key: kept}

    def integrations_by_method(self) -> dict[IntegrationMethod, list[EnabledIntegration]]:
        """
        Partition enabled integrations by preferred method.

        Every IntegrationMethod member gets a bucket (possibly empty), so
        callers can index any method without a membership check.
        """
        buckets: dict[IntegrationMethod, list[EnabledIntegration]] = {
            method: [] for method in IntegrationMethod
        }
        for ii in self.instance_integrations:
            buckets[ii.method].append(ii)
        return buckets
