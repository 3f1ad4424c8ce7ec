"""
Workspace Files Builder.

Generates the markdown files placed in the agent's workspace:

- SOUL.md:  appended to the agent's persona file; lists integrations
- USER.md:  owner identity; always overwritten
- PROXY.md: how to call proxy-method integrations through the control plane
- TOOLS.md: reserved, never populated (enabled skills are not projected yet)

A file is only present when the instance has something to put in it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from clawconfig.schemas import IntegrationMethod

if TYPE_CHECKING:
    from clawconfig.builder.instructions import InstructionCatalog
    from clawconfig.schemas import EnabledIntegration, InstanceSnapshot, InstanceUser

logger = logging.getLogger(__name__)

SOUL_MD = "SOUL.md"
USER_MD = "USER.md"
TOOLS_MD = "TOOLS.md"
PROXY_MD = "PROXY.md"

# Files the startup script appends to instead of overwriting
APPEND_FILES = frozenset({SOUL_MD})


@dataclass(frozen=True)
class WorkspaceFiles(Mapping[str, str]):
    """
    Immutable filename -> markdown view.

    Iteration order is fixed (SOUL.md, USER.md, TOOLS.md, PROXY.md) and
    only files with content are keys.
    """

    soul: str | None = None
    user: str | None = None
    tools: str | None = None
    proxy: str | None = None

    def _as_dict(self) -> dict[str, str]:
        files = {
            SOUL_MD: self.soul,
            USER_MD: self.user,
            TOOLS_MD: self.tools,
            PROXY_MD: self.proxy,
        }
        return {name: content for name, content in files.items() if content}

    def __getitem__(self, filename: str) -> str:
        return self._as_dict()[filename]

    def __iter__(self) -> Iterator[str]:
        return iter(self._as_dict())

    def __len__(self) -> int:
        return len(self._as_dict())


def escape_for_heredoc(content: str) -> str:
    r"""
    Escape content for embedding in a single-quoted heredoc.

    Backslashes are doubled and every single quote becomes the
    close-quote/escaped-quote/reopen-quote triplet:

        It's a \test  ->  It'\''s a \\test
    """
    return content.replace("\\", "\\\\").replace("'", "'\\''")


def _bullet(ii: EnabledIntegration) -> str:
    account = ii.user_integration.account_identifier
    suffix = f" ({account})" if account else ""
    return f"- **{ii.integration.name}**{suffix}"


def build_soul_additions(
    snapshot: InstanceSnapshot,
    instructions: InstructionCatalog | None = None,
) -> str | None:
    """
    Build the SOUL.md fragment for an instance.

    Returns None when no integrations are enabled.
    """
    if not snapshot.instance_integrations:
        return None

    by_method = snapshot.integrations_by_method()
    mcp = by_method[IntegrationMethod.MCP]
    proxy = by_method[IntegrationMethod.PROXY]

    sections = [
        f"""
---

## FasterClaw Instance

This instance is managed by FasterClaw (Instance ID: `{snapshot.id}`).
"""
    ]

    if mcp:
        bullets = "\n".join(
            f"{_bullet(ii)} - Use MCP tools for {ii.provider} operations" for ii in mcp
        )
        sections.append(
            f"""
### MCP Integrations

The following integrations are available via MCP tools:

{bullets}

MCP tools are automatically available. Use them directly for API operations.
"""
        )

    if proxy:
        bullets = "\n".join(_bullet(ii) for ii in proxy)
        sections.append(
            f"""
### Secure Proxy Integrations

The following integrations use the FasterClaw secure proxy:

{bullets}

See PROXY.md for usage instructions.
"""
        )

    if instructions:
        capabilities = _capability_section(
            [*mcp, *by_method[IntegrationMethod.CLI]], instructions
        )
        if capabilities:
            sections.append(capabilities)

    sections.append("---")
    return "\n".join(sections)


def _capability_section(
    integrations: list[EnabledIntegration],
    instructions: InstructionCatalog,
) -> str | None:
    blocks = []
    seen: set[str] = set()
    for ii in integrations:
        text = instructions.get(ii.provider)
        if not text or ii.provider in seen:
            continue
        seen.add(ii.provider)
        blocks.append(f"### {ii.integration.name} Integration\n\n{text.strip()}\n")

    if not blocks:
        return None
    return "\n## Integration Capabilities\n\n" + "\n".join(blocks)


def build_user_md(user: InstanceUser) -> str:
    return f"""# User Information

- **Name:** {user.name or 'Not specified'}
- **Email:** {user.email}

This information helps personalize responses and identify the user in integrations.
"""


def build_proxy_instructions(snapshot: InstanceSnapshot, proxy_url: str) -> str | None:
    """
    Build PROXY.md for proxy-method integrations.

    Returns None when the instance has none. The document never carries
    a token: the proxy injects credentials server-side.
    """
    proxy = snapshot.integrations_by_method()[IntegrationMethod.PROXY]
    if not proxy:
        return None

    providers = "\n".join(
        f"""### {ii.integration.name}

Provider: `{ii.provider}`

**Example Request:**
```bash
curl -X POST "{proxy_url}/proxy/v2/{ii.provider}/{{action}}" \\
  -H "Content-Type: application/json" \\
  -d '{{"instanceId": "{snapshot.id}", "params": {{}}}}'
```

**Available Actions:**
- Use `GET {proxy_url}/proxy/v2/actions` to see all available actions
"""
        for ii in proxy
    )

    return f"""# FasterClaw Secure Proxy

Use the secure proxy for API calls. The proxy handles authentication automatically.

## Configuration

- **Proxy URL:** {proxy_url}
- **Instance ID:** {snapshot.id}

## Available Providers

{providers}

## Important Notes

1. Always include the `instanceId` in your requests
2. The proxy handles token management - never include tokens in requests
3. Check the response for `success: false` to handle errors
"""


def build_workspace_files(
    snapshot: InstanceSnapshot,
    *,
    proxy_url: str,
    instructions: InstructionCatalog | None = None,
) -> WorkspaceFiles:
    """
    Build all workspace files for an instance.

    Args:
        snapshot: Loaded instance state
        proxy_url: Secure proxy base URL (AppSettings.proxy_base_url)
        instructions: Optional per-provider instructions for SOUL.md

    Returns:
        WorkspaceFiles with only the files that have content
    """
    files = WorkspaceFiles(
        soul=build_soul_additions(snapshot, instructions),
        user=build_user_md(snapshot.user) if snapshot.user else None,
        proxy=build_proxy_instructions(snapshot, proxy_url),
    )

    if snapshot.instance_skills:
        logger.debug(
            f"[workspace] {len(snapshot.instance_skills)} enabled skills not projected | "
            f"instance={snapshot.id}"
        )

    logger.debug(f"[workspace] Built {list(files)} | instance={snapshot.id}")
    return files
