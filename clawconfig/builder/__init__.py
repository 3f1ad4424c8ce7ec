"""
clawconfig Builders.

Pure functions from an InstanceSnapshot to the emitted artifacts:

- mcp: RuntimeConfig (model selection, channel policy, MCP servers)
  and the MCP token environment
- workspace: SOUL.md / USER.md / PROXY.md markdown
- startup_script: the shell program the container boots with
- instructions: static per-provider markdown catalog

None of these perform I/O; the orchestrator in clawconfig.runtime
loads the snapshot and resolves tokens before calling them.
"""

from clawconfig.builder.instructions import InstructionCatalog
from clawconfig.builder.mcp import (
    TOKEN_ENV_VARS,
    build_mcp_config,
    build_mcp_env_vars,
    build_runtime_config,
    get_token_env_var,
    parse_ai_model,
)
from clawconfig.builder.startup_script import (
    STARTUP_SCRIPT_BUILDERS,
    build_docker_minimal_startup_script,
    build_docker_startup_script,
    build_fly_minimal_startup_script,
    build_fly_startup_script,
    build_minimal_startup_script,
    build_startup_script,
)
from clawconfig.builder.workspace import (
    PROXY_MD,
    SOUL_MD,
    TOOLS_MD,
    USER_MD,
    WorkspaceFiles,
    build_workspace_files,
    escape_for_heredoc,
)

__all__ = [
    # Runtime config
    "TOKEN_ENV_VARS",
    "build_mcp_config",
    "build_mcp_env_vars",
    "build_runtime_config",
    "get_token_env_var",
    "parse_ai_model",
    # Workspace
    "PROXY_MD",
    "SOUL_MD",
    "TOOLS_MD",
    "USER_MD",
    "WorkspaceFiles",
    "build_workspace_files",
    "escape_for_heredoc",
    "InstructionCatalog",
    # Startup script
    "STARTUP_SCRIPT_BUILDERS",
    "build_docker_minimal_startup_script",
    "build_docker_startup_script",
    "build_fly_minimal_startup_script",
    "build_fly_startup_script",
    "build_minimal_startup_script",
    "build_startup_script",
]
