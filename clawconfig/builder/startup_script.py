"""
Startup Script Builder.

Generates the POSIX shell program a container runs once at boot. The
script, top to bottom:

1. Creates the workspace directory
2. Writes AI provider credentials to ~/.openclaw/.env
3. Decodes OPENCLAW_CONFIG_B64 into ~/.openclaw/openclaw.json, if set
4. Writes workspace files (SOUL.md appended, everything else overwritten)
5. Sets the AI model through the OpenClaw CLI
6. Sets gateway/channel/plugin keys through the OpenClaw CLI
7. Execs the gateway, replacing the shell as PID 1

Quoting rules:
    - Credentials use an UNQUOTED heredoc so `$VAR` expands from the
      container environment at boot. No secret is ever embedded in the
      script text.
    - Workspace content uses a QUOTED heredoc and is escaped with
      escape_for_heredoc(); nothing in it is expanded.
    - Every value interpolated into a command line goes through
      shlex.quote().

Every optional step tolerates failure on its own (`|| true`, no
`set -e`). Only the final exec is unguarded.
"""

from __future__ import annotations

import json
import logging
import shlex
from collections.abc import Mapping
from typing import Any

from clawconfig.builder.workspace import APPEND_FILES, escape_for_heredoc
from clawconfig.schemas import ChannelsConfig, GatewayConfig, PluginsConfig, RuntimeConfig

logger = logging.getLogger(__name__)

OPENCLAW_HOME = "~/.openclaw"
WORKSPACE_DIR = f"{OPENCLAW_HOME}/workspace"
CREDENTIALS_FILE = f"{OPENCLAW_HOME}/.env"
CONFIG_FILE = f"{OPENCLAW_HOME}/openclaw.json"
CONFIG_ENV_VAR = "OPENCLAW_CONFIG_B64"
OPENCLAW_CLI = "node openclaw.mjs"

# Supplied by the runtime provider when the container is created
CREDENTIAL_ENV_VARS = ("ANTHROPIC_API_KEY", "OPENAI_API_KEY", "GOOGLE_API_KEY")

HEREDOC_DELIMITER = "FASTERCLAW_EOF"
TOLERATE_FAILURE = "2>/dev/null || true"


def _heredoc_delimiter(content: str) -> str:
    """Default delimiter, suffixed until no content line equals it."""
    lines = set(content.splitlines())
    delimiter = HEREDOC_DELIMITER
    n = 1
    while delimiter in lines:
        delimiter = f"{HEREDOC_DELIMITER}_{n}"
        n += 1
    return delimiter


def _flatten(prefix: str, value: Any) -> list[tuple[str, Any]]:
    if isinstance(value, dict):
        items: list[tuple[str, Any]] = []
        for key, child in value.items():
            items.extend(_flatten(f"{prefix}.{key}", child))
        return items
    return [(prefix, value)]


def _config_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


# =============================================================================
# Blocks
# =============================================================================


def _directories_block() -> str:
    return f"""#!/bin/sh

# Ensure directories exist
mkdir -p {WORKSPACE_DIR}"""


def _credentials_block() -> str:
    assignments = "\n".join(f"{name}=${name}" for name in CREDENTIAL_ENV_VARS)
    return f"""# Write AI credentials to OpenClaw's .env file
# Unquoted heredoc: variables expand from the container environment at boot
cat > {CREDENTIALS_FILE} << CREDEOF
# AI Provider Credentials - Managed by FasterClaw
{assignments}
CREDEOF
chmod 600 {CREDENTIALS_FILE} {TOLERATE_FAILURE}
echo "AI credentials written to {CREDENTIALS_FILE}\""""


def _config_file_block() -> str:
    return f"""if [ -n "${CONFIG_ENV_VAR}" ]; then
  echo "${CONFIG_ENV_VAR}" | base64 -d > {CONFIG_FILE}
  echo "OpenClaw config written from {CONFIG_ENV_VAR}"
fi"""


def _workspace_file_block(filename: str, content: str) -> str:
    escaped = escape_for_heredoc(content)
    delimiter = _heredoc_delimiter(escaped)
    operator = ">>" if filename in APPEND_FILES else ">"
    return f"""cat {operator} {WORKSPACE_DIR}/{filename} << '{delimiter}'
{escaped}
{delimiter}
echo "Wrote {filename}\""""


def _model_block(ai_provider: str, ai_model: str) -> str:
    selector = f"{ai_provider}/{ai_model}"
    return (
        f"{OPENCLAW_CLI} models set {shlex.quote(selector)} {TOLERATE_FAILURE}\n"
        f"echo {shlex.quote(f'AI model set to {selector}')}"
    )


def _settings_block(
    gateway: GatewayConfig,
    channels: ChannelsConfig,
    plugins: PluginsConfig,
) -> str:
    settings = [
        *_flatten("gateway", gateway.to_wire()),
        *_flatten("channels", channels.to_wire()),
        *_flatten("plugins", plugins.to_wire()),
    ]
    lines = [
        f"{OPENCLAW_CLI} config set {shlex.quote(key)} "
        f"{shlex.quote(_config_value(value))} {TOLERATE_FAILURE}"
        for key, value in settings
    ]
    lines.append('echo "OpenClaw configured"')
    return "\n".join(lines)


def _gateway_block() -> str:
    return f"""echo "Starting OpenClaw gateway..."
exec {OPENCLAW_CLI} gateway"""


def _join(blocks: list[str]) -> str:
    return "\n\n".join(blocks) + "\n"


# =============================================================================
# Builders
# =============================================================================


def build_startup_script(
    config: RuntimeConfig,
    workspace_files: Mapping[str, str],
    ai_provider: str,
    ai_model: str,
) -> str:
    """
    Build the container startup script.

    Args:
        config: Runtime config; its gateway/channel/plugin settings are
            mirrored as CLI `config set` commands
        workspace_files: filename -> markdown, written in mapping order
        ai_provider: Provider half of the model split
        ai_model: Model half of the model split

    Returns:
        Shell program text ending with `exec node openclaw.mjs gateway`
    """
    blocks = [
        _directories_block(),
        _credentials_block(),
        _config_file_block(),
    ]

    for filename, content in workspace_files.items():
        if content:
            blocks.append(_workspace_file_block(filename, content))

    blocks.extend(
        [
            _model_block(ai_provider, ai_model),
            _settings_block(config.gateway, config.channels, config.plugins),
            _gateway_block(),
        ]
    )

    logger.debug(
        f"[startup_script] Built script | instance={config.meta.instance_id} | "
        f"files={[name for name, content in workspace_files.items() if content]}"
    )
    return _join(blocks)


def build_minimal_startup_script(ai_provider: str, ai_model: str) -> str:
    """
    Startup script for an instance with no integrations.

    Same blocks as build_startup_script() minus the config decode and
    workspace writes, with the default gateway/channel/plugin settings.
    """
    return _join(
        [
            _directories_block(),
            _credentials_block(),
            _model_block(ai_provider, ai_model),
            _settings_block(GatewayConfig(), ChannelsConfig(), PluginsConfig()),
            _gateway_block(),
        ]
    )


# Runtime-provider entry points. These are aliases, not variants: the
# script must not differ between Docker and Fly.io.
build_docker_startup_script = build_startup_script
build_fly_startup_script = build_startup_script
build_docker_minimal_startup_script = build_minimal_startup_script
build_fly_minimal_startup_script = build_minimal_startup_script

STARTUP_SCRIPT_BUILDERS = {
    "docker": build_docker_startup_script,
    "fly": build_fly_startup_script,
}
