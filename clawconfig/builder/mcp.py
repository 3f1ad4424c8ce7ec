"""
Runtime Config Builder.

Pure functions from an InstanceSnapshot to the gateway's RuntimeConfig,
plus the container environment derived from resolved MCP tokens.

Only integrations whose preferred method is `mcp` contribute here:
    - mcp:   registered as a tool server; token exported as an env var
    - cli:   nothing (the CLI reads its own credentials)
    - proxy: nothing (the control plane injects credentials server-side,
             the token never reaches the container)

Env placeholders:
    Server `env` maps hold `${NAME}` placeholders, never values. The
    gateway expands them at boot from the container's real environment.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from clawconfig.schemas import (
    AgentConfig,
    ConfigMeta,
    IntegrationMethod,
    McpConfig,
    McpServerConfig,
    RuntimeConfig,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from clawconfig.schemas import EnabledIntegration, InstanceSnapshot

logger = logging.getLogger(__name__)

DEFAULT_AI_PROVIDER = "anthropic"
DEFAULT_GENERATOR_TAG = "fasterclaw"

# Providers whose tokens are consumed under a well-known variable name
TOKEN_ENV_VARS: dict[str, str] = {
    "github": "GITHUB_TOKEN",
    "slack": "SLACK_BOT_TOKEN",
    "google": "GOOGLE_OAUTH_TOKEN",
    "google-drive": "GOOGLE_OAUTH_TOKEN",
    "gmail": "GOOGLE_OAUTH_TOKEN",
    "google-calendar": "GOOGLE_OAUTH_TOKEN",
}


def parse_ai_model(ai_model: str) -> tuple[str, str]:
    """
    Split a `provider/model` selector on its first slash.

    Without a slash the provider defaults to anthropic and the whole
    string is the model name.

    Examples:
        >>> parse_ai_model("openai/gpt-5")
        ('openai', 'gpt-5')
        >>> parse_ai_model("gpt-5")
        ('anthropic', 'gpt-5')
    """
    provider, sep, model = ai_model.partition("/")
    if not sep:
        return DEFAULT_AI_PROVIDER, ai_model
    return provider, model


def get_token_env_var(provider: str) -> str:
    """Environment variable name an MCP server reads the provider token from."""
    known = TOKEN_ENV_VARS.get(provider)
    if known:
        return known
    return f"{provider.upper().replace('-', '_')}_TOKEN"


def _mcp_integrations(
    integrations: Iterable[EnabledIntegration],
) -> list[EnabledIntegration]:
    return [ii for ii in integrations if ii.method is IntegrationMethod.MCP]


def build_mcp_config(integrations: Iterable[EnabledIntegration]) -> McpConfig | None:
    """
    Build the tool-server registry from enabled integrations.

    Returns None when no server results, so the `mcp` section is left
    out of the runtime config entirely.
    """
    servers: dict[str, McpServerConfig] = {}

    for ii in _mcp_integrations(integrations):
        descriptor = ii.integration.mcp_server
        if descriptor is None:
            logger.warning(
                f"[mcp_config] Skipping mcp integration without server descriptor | "
                f"provider={ii.provider} | user_integration={ii.user_integration.id}"
            )
            continue

        env = {name: f"${{{name}}}" for name in descriptor.required_env_vars}
        servers[ii.provider] = McpServerConfig(
            command="npx",
            args=("-y", descriptor.npm_package),
            env=env or None,
        )

    if not servers:
        return None

    logger.debug(f"[mcp_config] Registered MCP servers: {sorted(servers)}")
    return McpConfig(servers=servers)


def build_mcp_env_vars(
    integrations: Iterable[EnabledIntegration],
    tokens: Mapping[str, str],
) -> dict[str, str]:
    """
    Container environment for MCP servers.

    Args:
        integrations: Enabled integrations
        tokens: Decrypted tokens keyed by user integration id

    Returns:
        {ENV_VAR_NAME: token} for every mcp integration with a token
    """
    env_vars: dict[str, str] = {}

    for ii in _mcp_integrations(integrations):
        token = tokens.get(ii.user_integration.id)
        if token:
            env_vars[get_token_env_var(ii.provider)] = token

    return env_vars


def build_runtime_config(
    snapshot: InstanceSnapshot,
    *,
    generator_tag: str = DEFAULT_GENERATOR_TAG,
    now: datetime | None = None,
) -> RuntimeConfig:
    """
    Build the gateway configuration for an instance.

    Args:
        snapshot: Loaded instance state
        generator_tag: Value of meta.generatedBy
        now: Generation timestamp (defaults to the current UTC time)

    Returns:
        RuntimeConfig with fixed channel/plugin defaults and, when any
        mcp integration is enabled, the tool-server registry
    """
    provider, model = parse_ai_model(snapshot.ai_model)

    return RuntimeConfig(
        meta=ConfigMeta(
            generated_by=generator_tag,
            generated_at=now or datetime.now(UTC),
            instance_id=snapshot.id,
        ),
        agent=AgentConfig(model=f"{provider}/{model}"),
        mcp=build_mcp_config(snapshot.instance_integrations),
    )
