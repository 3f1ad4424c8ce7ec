"""
clawconfig Secrets.

Credential decryption for integration tokens:

- TokenCipher: AES-256-GCM cipher compatible with the control plane
- TokenResolver: concurrent, failure-isolating decryption of a snapshot
- ResolvedSecrets: the per-build result, keyed by user integration id
"""

from clawconfig.secrets.encryption import TokenCipher
from clawconfig.secrets.resolver import (
    DecryptionFailure,
    ResolvedSecrets,
    TokenDecryptor,
    TokenResolver,
)

__all__ = [
    "DecryptionFailure",
    "ResolvedSecrets",
    "TokenCipher",
    "TokenDecryptor",
    "TokenResolver",
]
