"""
Tests for startup script generation.

Tests for:
- Block order and content of the full script
- Credential and workspace heredoc quoting
- Minimal script
- Runtime-provider aliases
"""

import shlex

from clawconfig.builder import (
    STARTUP_SCRIPT_BUILDERS,
    build_docker_minimal_startup_script,
    build_docker_startup_script,
    build_fly_minimal_startup_script,
    build_fly_startup_script,
    build_minimal_startup_script,
    build_runtime_config,
    build_startup_script,
    build_workspace_files,
)

PROXY_URL = "https://proxy.example.com"


def _script(snapshot, fixed_now, files=None) -> str:
    config = build_runtime_config(snapshot, now=fixed_now)
    if files is None:
        files = build_workspace_files(snapshot, proxy_url=PROXY_URL)
    return build_startup_script(config, files, "anthropic", "claude-sonnet-4-0")


# =============================================================================
# Full Script Tests
# =============================================================================


class TestStartupScript:
    """Tests for build_startup_script."""

    def test_shape(self, make_snapshot, github_integration, fixed_now):
        """Test shebang first and the gateway exec last."""
        script = _script(make_snapshot([github_integration]), fixed_now)
        lines = script.rstrip("\n").splitlines()

        assert lines[0] == "#!/bin/sh"
        assert lines[-1] == "exec node openclaw.mjs gateway"
        assert script.endswith("\n")
        assert "mkdir -p ~/.openclaw/workspace" in script
        assert "set -e" not in script

    def test_block_order(self, make_snapshot, github_integration, calendar_integration, fixed_now):
        script = _script(make_snapshot([github_integration, calendar_integration]), fixed_now)

        markers = [
            "mkdir -p",
            "<< CREDEOF",
            "OPENCLAW_CONFIG_B64",
            "SOUL.md <<",
            "USER.md <<",
            "PROXY.md <<",
            "models set",
            "config set",
            "exec node openclaw.mjs gateway",
        ]
        positions = [script.index(marker) for marker in markers]
        assert positions == sorted(positions)

    def test_credentials_expand_at_boot(self, make_snapshot, github_integration, fixed_now):
        """Test credentials come from the environment, never literals."""
        script = _script(make_snapshot([github_integration]), fixed_now)

        assert "cat > ~/.openclaw/.env << CREDEOF" in script
        assert "ANTHROPIC_API_KEY=$ANTHROPIC_API_KEY" in script
        assert "OPENAI_API_KEY=$OPENAI_API_KEY" in script
        assert "GOOGLE_API_KEY=$GOOGLE_API_KEY" in script
        assert "chmod 600 ~/.openclaw/.env" in script
        assert "'CREDEOF'" not in script

    def test_no_token_literals(self, make_snapshot, github_integration, fixed_now):
        script = _script(make_snapshot([github_integration]), fixed_now)

        assert "ghp_abc" not in script

    def test_config_decode_block(self, make_snapshot, fixed_now):
        script = _script(make_snapshot(), fixed_now)

        assert 'if [ -n "$OPENCLAW_CONFIG_B64" ]; then' in script
        assert 'echo "$OPENCLAW_CONFIG_B64" | base64 -d > ~/.openclaw/openclaw.json' in script

    def test_soul_appended_others_overwritten(
        self, make_snapshot, github_integration, calendar_integration, fixed_now
    ):
        script = _script(make_snapshot([github_integration, calendar_integration]), fixed_now)

        assert "cat >> ~/.openclaw/workspace/SOUL.md << 'FASTERCLAW_EOF'" in script
        assert "cat > ~/.openclaw/workspace/USER.md << 'FASTERCLAW_EOF'" in script
        assert "cat > ~/.openclaw/workspace/PROXY.md << 'FASTERCLAW_EOF'" in script
        assert script.count(">>") == 1

    def test_no_workspace_blocks_without_files(self, make_snapshot, fixed_now):
        script = _script(make_snapshot(user=None), fixed_now)

        assert "FASTERCLAW_EOF" not in script
        assert "~/.openclaw/workspace/" not in script

    def test_model_line(self, make_snapshot, fixed_now):
        script = _script(make_snapshot(), fixed_now)

        assert "node openclaw.mjs models set anthropic/claude-sonnet-4-0 2>/dev/null || true" in script
        assert "echo 'AI model set to anthropic/claude-sonnet-4-0'" in script

    def test_config_set_lines(self, make_snapshot, fixed_now):
        """Test gateway, channel and plugin keys are mirrored as CLI calls."""
        script = _script(make_snapshot(), fixed_now)

        assert "node openclaw.mjs config set gateway.mode local 2>/dev/null || true" in script
        assert "config set channels.telegram.enabled true" in script
        assert "config set channels.telegram.dmPolicy open" in script
        allow_from = shlex.quote('["*"]')
        assert f"config set channels.telegram.allowFrom {allow_from}" in script
        assert "config set plugins.entries.telegram.enabled true" in script
        assert 'echo "OpenClaw configured"' in script

    def test_content_is_escaped(self, make_snapshot, make_integration, fixed_now):
        """Test quotes and backslashes in content survive the quoted heredoc."""
        snapshot = make_snapshot([make_integration("linear", account="o'brien\\x")])

        script = _script(snapshot, fixed_now)

        assert "o'\\''brien\\\\x" in script

    def test_delimiter_collision(self, make_snapshot, fixed_now):
        """Test content containing the delimiter line gets a unique one."""
        files = {"USER.md": "before\nFASTERCLAW_EOF\nafter\n"}

        script = _script(make_snapshot(), fixed_now, files=files)

        assert "cat > ~/.openclaw/workspace/USER.md << 'FASTERCLAW_EOF_1'" in script
        assert "\nFASTERCLAW_EOF_1\n" in script

    def test_empty_files_skipped(self, make_snapshot, fixed_now):
        script = _script(make_snapshot(), fixed_now, files={"USER.md": ""})

        assert "USER.md" not in script


# =============================================================================
# Minimal Script Tests
# =============================================================================


class TestMinimalStartupScript:
    """Tests for build_minimal_startup_script."""

    def test_content(self):
        script = build_minimal_startup_script("openai", "gpt-5")

        assert script.startswith("#!/bin/sh\n")
        assert script.rstrip("\n").endswith("exec node openclaw.mjs gateway")
        assert "<< CREDEOF" in script
        assert "models set openai/gpt-5" in script
        assert "config set gateway.mode local" in script

    def test_no_config_or_workspace(self):
        script = build_minimal_startup_script("anthropic", "claude-sonnet-4-0")

        assert "OPENCLAW_CONFIG_B64" not in script
        assert "FASTERCLAW_EOF" not in script

    def test_smaller_than_full(self, make_snapshot, github_integration, fixed_now):
        full = _script(make_snapshot([github_integration]), fixed_now)

        assert len(build_minimal_startup_script("anthropic", "claude-sonnet-4-0")) < len(full)


# =============================================================================
# Alias Tests
# =============================================================================


class TestRuntimeProviderAliases:
    """Tests for the Docker and Fly.io entry points."""

    def test_aliases_are_identical(self):
        assert build_docker_startup_script is build_startup_script
        assert build_fly_startup_script is build_startup_script
        assert build_docker_minimal_startup_script is build_minimal_startup_script
        assert build_fly_minimal_startup_script is build_minimal_startup_script

    def test_builder_table(self):
        assert set(STARTUP_SCRIPT_BUILDERS) == {"docker", "fly"}
        assert STARTUP_SCRIPT_BUILDERS["fly"] is build_startup_script
