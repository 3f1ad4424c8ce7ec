"""
Pytest configuration and fixtures for clawconfig tests.
"""

import sys
from datetime import UTC, datetime
from pathlib import Path

import pytest

# Add the repository root to path for imports
# This allows `from clawconfig.builder import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from clawconfig.config import AppSettings  # noqa: E402
from clawconfig.schemas import InstanceSnapshot  # noqa: E402
from clawconfig.secrets import TokenCipher  # noqa: E402

OWNER_ID = "user_1"
INSTANCE_ID = "inst_1"
TEST_KEY = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"
DEFAULT_USER = {"id": OWNER_ID, "email": "ada@example.com", "name": "Ada Lovelace"}
GITHUB_PACKAGE = "@modelcontextprotocol/server-github"


@pytest.fixture
def cipher():
    """Cipher with a fixed test key."""
    return TokenCipher(TEST_KEY)


@pytest.fixture
def fixed_now():
    return datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)


@pytest.fixture
def settings():
    """Settings with a known proxy URL and no environment lookups."""
    return AppSettings(api_url="https://api.example.com", encryption_key=TEST_KEY)


@pytest.fixture
def make_integration(cipher):
    """Factory for instance-integration records in control-plane (camelCase) form."""

    def _make(
        provider: str = "github",
        *,
        name: str | None = None,
        method: str = "mcp",
        npm_package: str | None = None,
        required_env_vars: tuple[str, ...] = (),
        token: str = "token-value",
        encrypted: str | None = None,
        account: str | None = None,
        ui_id: str | None = None,
        owner: str = OWNER_ID,
        with_descriptor: bool = True,
    ) -> dict:
        ui_id = ui_id or f"ui_{provider}"
        integration = {
            "id": f"int_{provider}",
            "slug": provider,
            "name": name or provider.title(),
            "provider": provider,
            "preferredMethod": method,
        }
        if method == "mcp" and with_descriptor:
            integration["mcpServer"] = {
                "id": f"mcp_{provider}",
                "provider": provider,
                "name": f"{provider} MCP",
                "npmPackage": npm_package or f"@mcp/{provider}",
                "version": "1.0.0",
                "requiredEnvVars": list(required_env_vars),
            }
        return {
            "id": f"ii_{ui_id}",
            "instanceId": INSTANCE_ID,
            "userIntegrationId": ui_id,
            "userIntegration": {
                "id": ui_id,
                "userId": owner,
                "integrationId": integration["id"],
                "encryptedAccessToken": encrypted if encrypted is not None else cipher.encrypt(token),
                "accountIdentifier": account,
                "integration": integration,
            },
        }

    return _make


@pytest.fixture
def make_snapshot():
    """Factory for validated InstanceSnapshots."""

    def _make(
        integrations=(),
        *,
        ai_model: str = "anthropic/claude-sonnet-4-0",
        user: dict | None = DEFAULT_USER,
        skills=(),
        provider: str = "fly",
        instance_id: str = INSTANCE_ID,
    ) -> InstanceSnapshot:
        return InstanceSnapshot.model_validate(
            {
                "id": instance_id,
                "userId": OWNER_ID,
                "name": "My Agent",
                "provider": provider,
                "aiModel": ai_model,
                "status": "running",
                "user": user,
                "instanceIntegrations": list(integrations),
                "instanceSkills": list(skills),
            }
        )

    return _make


@pytest.fixture
def github_integration(make_integration):
    """The GitHub MCP integration used in the end-to-end scenario."""
    return make_integration(
        "github",
        name="GitHub",
        npm_package=GITHUB_PACKAGE,
        required_env_vars=("GITHUB_TOKEN",),
        token="ghp_abc",
        account="octocat",
    )


@pytest.fixture
def calendar_integration(make_integration):
    """A proxy-method Google Calendar integration."""
    return make_integration(
        "google-calendar",
        name="Google Calendar",
        method="proxy",
        token="ya29.calendar",
        account="ada@example.com",
    )
