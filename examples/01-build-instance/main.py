"""
Build Instance Example

This example demonstrates the full build for one instance:
1. Encrypt a token the way the control plane stores it
2. Load an instance snapshot from memory
3. Build config, workspace files, startup script and env vars

Run: python examples/01-build-instance/main.py
"""

import asyncio
import os

from clawconfig import ConfigBuilder, InstanceSnapshot, MemoryInstanceLoader, TokenCipher
from clawconfig.builder import InstructionCatalog
from clawconfig.config import AppSettings, configure_logging

# =============================================================================
# Sample Data
# =============================================================================


def make_snapshot(cipher: TokenCipher) -> InstanceSnapshot:
    return InstanceSnapshot.model_validate(
        {
            "id": "inst_demo",
            "userId": "user_demo",
            "name": "Demo",
            "provider": "docker",
            "aiModel": "anthropic/claude-sonnet-4-0",
            "user": {"id": "user_demo", "email": "demo@example.com", "name": "Demo User"},
            "instanceIntegrations": [
                {
                    "id": "ii_github",
                    "userIntegrationId": "ui_github",
                    "userIntegration": {
                        "id": "ui_github",
                        "userId": "user_demo",
                        "encryptedAccessToken": cipher.encrypt("ghp_demo_token"),
                        "accountIdentifier": "octocat",
                        "integration": {
                            "slug": "github",
                            "name": "GitHub",
                            "provider": "github",
                            "preferredMethod": "mcp",
                            "mcpServer": {
                                "provider": "github",
                                "name": "GitHub MCP",
                                "npmPackage": "@modelcontextprotocol/server-github",
                                "requiredEnvVars": ["GITHUB_TOKEN"],
                            },
                        },
                    },
                },
                {
                    "id": "ii_calendar",
                    "userIntegrationId": "ui_calendar",
                    "userIntegration": {
                        "id": "ui_calendar",
                        "userId": "user_demo",
                        "encryptedAccessToken": cipher.encrypt("ya29.demo"),
                        "integration": {
                            "slug": "google-calendar",
                            "name": "Google Calendar",
                            "provider": "google-calendar",
                            "preferredMethod": "proxy",
                        },
                    },
                },
            ],
        }
    )


# =============================================================================
# Main
# =============================================================================


async def main():
    configure_logging("INFO")

    cipher = TokenCipher(os.urandom(32).hex())
    settings = AppSettings(api_url="https://api.example.com")

    builder = ConfigBuilder(
        loader=MemoryInstanceLoader([make_snapshot(cipher)]),
        decryptor=cipher,
        settings=settings,
        instructions=InstructionCatalog.default(),
    )

    output = await builder.build_full_config("inst_demo")

    print("=== openclaw.json ===")
    print(output.openclaw_config.to_json())
    for filename, content in output.workspace_files.items():
        print(f"=== {filename} ===")
        print(content)
    print("=== startup script ===")
    print(output.startup_script)
    print("=== env var names ===")
    print(sorted(output.container_environment()))


if __name__ == "__main__":
    asyncio.run(main())
