"""
Token Resolver.

Decrypts the stored credential of every enabled integration on a
snapshot. Each decryption is independent: they run concurrently, one
failure never cancels its siblings, and failures are collected next to
the results instead of being raised.

Design Principle:
    The resolver never raises for a bad credential. A token that cannot
    be decrypted is logged (id, provider and error only, never the blob
    or any plaintext) and is simply absent from the result. The build
    carries on with whatever did resolve.

Usage:
    resolver = TokenResolver(TokenCipher(key))
    secrets = await resolver.resolve(snapshot)

    secrets.get(user_integration_id)   # keyed by user integration
    secrets.by_provider(snapshot)      # provider-keyed export
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from clawconfig.schemas import EnabledIntegration, InstanceSnapshot

logger = logging.getLogger(__name__)


class TokenDecryptor(Protocol):
    """Anything that turns an encrypted blob into a plaintext credential."""

    def decrypt(self, ciphertext: str) -> str | Awaitable[str]:
        ...


@dataclass(frozen=True, slots=True)
class DecryptionFailure:
    """One credential that could not be resolved."""

    user_integration_id: str
    provider: str
    error: str


@dataclass(frozen=True)
class ResolvedSecrets(Mapping[str, str]):
    """
    Decrypted credentials for a single build, keyed by user integration id.

    Read-only. Lives for one build call and is never persisted. The
    repr lists ids only so an accidental log line cannot leak a token.
    """

    tokens: Mapping[str, str] = field(default_factory=dict)
    failures: tuple[DecryptionFailure, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "tokens", MappingProxyType(dict(self.tokens)))

    def __getitem__(self, user_integration_id: str) -> str:
        return self.tokens[user_integration_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)

    def __repr__(self) -> str:
        return (
            f"ResolvedSecrets(resolved={sorted(self.tokens)}, "
            f"failed={[f.user_integration_id for f in self.failures]})"
        )

    def by_provider(self, snapshot: InstanceSnapshot) -> dict[str, str]:
        """
        Provider-keyed view of the resolved tokens.

        When two enabled integrations share a provider key the later one
        in snapshot order wins.
        """
        tokens: dict[str, str] = {}
        for ii in snapshot.instance_integrations:
            token = self.tokens.get(ii.user_integration.id)
            if token is not None:
                tokens[ii.provider] = token
        return tokens


class TokenResolver:
    """
    Decrypts integration credentials with an injected decryptor.

    The decryptor may be synchronous (a local TokenCipher) or return an
    awaitable (a remote key service); both are gathered concurrently.
    """

    def __init__(self, decryptor: TokenDecryptor):
        self._decryptor = decryptor

    async def resolve(self, snapshot: InstanceSnapshot) -> ResolvedSecrets:
        integrations = snapshot.instance_integrations
        if not integrations:
            return ResolvedSecrets()

        results = await asyncio.gather(
            *(self._decrypt_one(ii) for ii in integrations),
            return_exceptions=True,
        )

        tokens: dict[str, str] = {}
        failures: list[DecryptionFailure] = []
        for ii, result in zip(integrations, results):
            ui_id = ii.user_integration.id
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.error(
                    f"[token_resolver] Failed to decrypt token | "
                    f"user_integration={ui_id} | provider={ii.provider} | "
                    f"error={type(result).__name__}: {result}"
                )
                failures.append(
                    DecryptionFailure(
                        user_integration_id=ui_id,
                        provider=ii.provider,
                        error=f"{type(result).__name__}: {result}",
                    )
                )
            else:
                tokens[ui_id] = result

        logger.info(
            f"[token_resolver] Resolved {len(tokens)}/{len(integrations)} tokens | "
            f"instance={snapshot.id}"
        )
        return ResolvedSecrets(tokens=tokens, failures=tuple(failures))

    async def _decrypt_one(self, ii: EnabledIntegration) -> str:
        result = self._decryptor.decrypt(ii.user_integration.encrypted_access_token)
        if inspect.isawaitable(result):
            result = await result
        return result
