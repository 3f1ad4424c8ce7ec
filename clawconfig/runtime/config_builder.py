"""
Configuration Builder.

Single entry point that turns an instance id into everything a container
needs at boot:

    1. Loader loads the InstanceSnapshot (the only fatal failure: not found)
    2. TokenResolver decrypts integration credentials (failures isolated)
    3. Pure builders derive the RuntimeConfig, WorkspaceFiles and script
    4. The bundle is returned; persisting or shipping it is the caller's job

The builder holds collaborators only, never per-instance state. Every
narrow entry point accepts an instance id or an already-loaded snapshot,
so callers combining several of them load once:

    builder = ConfigBuilder(loader=loader, decryptor=cipher)
    snapshot = await builder.load("inst_123")
    config = await builder.build_openclaw_config(snapshot)
    env = await builder.get_mcp_env_vars(snapshot)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from clawconfig.builder import (
    STARTUP_SCRIPT_BUILDERS,
    WorkspaceFiles,
    build_mcp_env_vars,
    build_minimal_startup_script,
    build_runtime_config,
    build_startup_script,
    build_workspace_files,
    parse_ai_model,
)
from clawconfig.builder.startup_script import CONFIG_ENV_VAR
from clawconfig.schemas import InstanceSnapshot
from clawconfig.secrets import ResolvedSecrets, TokenResolver

if TYPE_CHECKING:
    from clawconfig.builder import InstructionCatalog
    from clawconfig.config import AppSettings
    from clawconfig.runtime.loaders import InstanceLoader
    from clawconfig.schemas import RuntimeConfig
    from clawconfig.secrets import TokenDecryptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfigBuilderOutput:
    """
    Everything generated for one instance.

    Attributes:
        openclaw_config: Gateway configuration
        workspace_files: Markdown files for the agent workspace
        startup_script: Container boot program
        env_vars: MCP token environment (secret values, excluded from repr)
    """

    openclaw_config: RuntimeConfig
    workspace_files: WorkspaceFiles
    startup_script: str = field(repr=False)
    env_vars: dict[str, str] = field(default_factory=dict, repr=False)

    def container_environment(self) -> dict[str, str]:
        """Env vars to set on the container, including the encoded config."""
        return {**self.env_vars, CONFIG_ENV_VAR: self.openclaw_config.to_base64()}


class ConfigBuilder:
    """
    Builds OpenClaw configuration for hosted instances.

    Example:
        builder = ConfigBuilder(
            loader=ApiInstanceLoader(settings.api_base_url),
            decryptor=TokenCipher.from_settings(settings),
        )
        output = await builder.build_full_config("inst_123")
    """

    def __init__(
        self,
        *,
        loader: InstanceLoader,
        decryptor: TokenDecryptor,
        settings: AppSettings | None = None,
        instructions: InstructionCatalog | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize builder.

        Args:
            loader: Source of instance snapshots
            decryptor: Credential decryption service
            settings: Settings (defaults to get_settings())
            instructions: Optional per-provider SOUL.md instructions
            clock: Timestamp source for config metadata
        """
        if settings is None:
            from clawconfig.config import get_settings

            settings = get_settings()

        self._loader = loader
        self._resolver = TokenResolver(decryptor)
        self._settings = settings
        self._instructions = instructions
        self._clock = clock or (lambda: datetime.now(UTC))

    async def load(self, instance: str | InstanceSnapshot) -> InstanceSnapshot:
        """Load a snapshot, or pass one through unchanged."""
        if isinstance(instance, InstanceSnapshot):
            return instance
        return await self._loader.get_instance(instance)

    async def resolve_tokens(self, instance: str | InstanceSnapshot) -> ResolvedSecrets:
        snapshot = await self.load(instance)
        return await self._resolver.resolve(snapshot)

    # ==================== Full build ====================

    async def build_full_config(self, instance: str | InstanceSnapshot) -> ConfigBuilderOutput:
        """
        Build config, workspace files, startup script and env vars.

        Raises:
            InstanceNotFoundError: If the instance id does not exist
        """
        snapshot = await self.load(instance)
        logger.info(
            f"[config_builder] Building config | instance={snapshot.id} | "
            f"integrations={len(snapshot.instance_integrations)} | "
            f"skills={len(snapshot.instance_skills)}"
        )

        openclaw_config = self._runtime_config(snapshot)
        workspace_files = self._workspace_files(snapshot)
        secrets = await self._resolver.resolve(snapshot)
        env_vars = build_mcp_env_vars(snapshot.instance_integrations, secrets)
        startup_script = self._startup_script(snapshot, openclaw_config, workspace_files)

        logger.info(
            f"[config_builder] Config built | instance={snapshot.id} | "
            f"mcp_servers={len(openclaw_config.mcp.servers) if openclaw_config.mcp else 0} | "
            f"files={list(workspace_files)} | env_vars={sorted(env_vars)}"
        )
        return ConfigBuilderOutput(
            openclaw_config=openclaw_config,
            workspace_files=workspace_files,
            startup_script=startup_script,
            env_vars=env_vars,
        )

    # ==================== Narrow entry points ====================

    async def build_openclaw_config(self, instance: str | InstanceSnapshot) -> RuntimeConfig:
        snapshot = await self.load(instance)
        return self._runtime_config(snapshot)

    async def build_workspace(self, instance: str | InstanceSnapshot) -> WorkspaceFiles:
        snapshot = await self.load(instance)
        return self._workspace_files(snapshot)

    async def build_startup_script(self, instance: str | InstanceSnapshot) -> str:
        snapshot = await self.load(instance)
        return self._startup_script(
            snapshot,
            self._runtime_config(snapshot),
            self._workspace_files(snapshot),
        )

    def get_minimal_startup_script(self, ai_provider: str, ai_model: str) -> str:
        return build_minimal_startup_script(ai_provider, ai_model)

    async def get_integration_tokens(self, instance: str | InstanceSnapshot) -> dict[str, str]:
        """Decrypted tokens keyed by provider, for every enabled integration."""
        snapshot = await self.load(instance)
        secrets = await self._resolver.resolve(snapshot)
        return secrets.by_provider(snapshot)

    async def get_mcp_env_vars(self, instance: str | InstanceSnapshot) -> dict[str, str]:
        snapshot = await self.load(instance)
        secrets = await self._resolver.resolve(snapshot)
        return build_mcp_env_vars(snapshot.instance_integrations, secrets)

    # ==================== Internals ====================

    def _runtime_config(self, snapshot: InstanceSnapshot) -> RuntimeConfig:
        return build_runtime_config(
            snapshot,
            generator_tag=self._settings.generator_tag,
            now=self._clock(),
        )

    def _workspace_files(self, snapshot: InstanceSnapshot) -> WorkspaceFiles:
        return build_workspace_files(
            snapshot,
            proxy_url=self._settings.proxy_base_url,
            instructions=self._instructions,
        )

    def _startup_script(
        self,
        snapshot: InstanceSnapshot,
        openclaw_config: RuntimeConfig,
        workspace_files: WorkspaceFiles,
    ) -> str:
        ai_provider, ai_model = parse_ai_model(snapshot.ai_model)
        build = STARTUP_SCRIPT_BUILDERS.get(snapshot.provider)
        if build is None:
            logger.warning(
                f"[config_builder] Unknown runtime provider '{snapshot.provider}', "
                f"using default startup script | instance={snapshot.id}"
            )
            build = build_startup_script
        return build(openclaw_config, workspace_files, ai_provider, ai_model)
