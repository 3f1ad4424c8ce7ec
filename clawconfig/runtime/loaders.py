"""
Instance Loaders.

Implementations of the InstanceLoader protocol for different backends.
The loader is the only place instance data enters the pipeline; it
returns a validated, immutable InstanceSnapshot or raises
InstanceNotFoundError.

Design Principle:
    Start simple, scale as needed.
    - Testing: MemoryInstanceLoader (in-memory)
    - Development: FileInstanceLoader (one JSON file per instance)
    - Production: ApiInstanceLoader (control-plane internal API)

Usage:
    loader = FileInstanceLoader("instances/")
    snapshot = await loader.get_instance("inst_123")
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from clawconfig.errors import InstanceNotFoundError, LoaderError, SnapshotIntegrityError
from clawconfig.schemas import InstanceSnapshot

logger = logging.getLogger(__name__)


class InstanceLoader(Protocol):
    """Read contract for instance snapshots."""

    async def get_instance(self, instance_id: str) -> InstanceSnapshot:
        """Load one instance with its relations; raise InstanceNotFoundError if absent."""
        ...


def parse_snapshot(data: Any, *, source: str) -> InstanceSnapshot:
    """Validate raw loader output, mapping validation failures to SnapshotIntegrityError."""
    try:
        return InstanceSnapshot.model_validate(data)
    except ValidationError as e:
        logger.error(f"[loader] Invalid instance data from {source}: {e.error_count()} errors")
        raise SnapshotIntegrityError(f"Invalid instance data from {source}: {e}") from e


class MemoryInstanceLoader:
    """
    In-memory instance loader for testing.

    Usage:
        loader = MemoryInstanceLoader()
        loader.add(snapshot)
        builder = ConfigBuilder(loader=loader, decryptor=cipher)
    """

    def __init__(self, snapshots: list[InstanceSnapshot] | None = None):
        self._snapshots: dict[str, InstanceSnapshot] = {}
        for snapshot in snapshots or []:
            self.add(snapshot)

    def add(self, snapshot: InstanceSnapshot) -> None:
        self._snapshots[snapshot.id] = snapshot

    async def get_instance(self, instance_id: str) -> InstanceSnapshot:
        snapshot = self._snapshots.get(instance_id)
        if snapshot is None:
            raise InstanceNotFoundError(instance_id)
        return snapshot

    def clear(self) -> None:
        self._snapshots.clear()


class FileInstanceLoader:
    """
    Loads instances from JSON files.

    Directory layout:
        instances/
        ├── inst_123.json
        └── inst_456.json

    Each file holds one instance record in control-plane (camelCase) form.
    """

    def __init__(self, base_dir: str | Path):
        self._base_dir = Path(base_dir)

    async def get_instance(self, instance_id: str) -> InstanceSnapshot:
        path = self._base_dir / f"{instance_id}.json"
        # Ids come from callers; refuse anything that escapes base_dir
        if path.parent != self._base_dir or not path.is_file():
            raise InstanceNotFoundError(instance_id)

        try:
            with path.open(encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"[file_loader] Failed to load {path}: {e}")
            raise LoaderError(f"Failed to load {path}: {e}") from e

        snapshot = parse_snapshot(data, source=str(path))
        logger.info(f"[file_loader] Loaded instance={instance_id} from {path}")
        return snapshot


class ApiInstanceLoader:
    """
    Loads instances from the control plane's internal API.

    Endpoint:
        GET {base_url}/internal/instances/{instance_id}
        -> 200 instance record (camelCase), 404 when unknown

    Usage:
        async with ApiInstanceLoader(base_url, api_token=token) as loader:
            snapshot = await loader.get_instance("inst_123")
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_token: str | None = None,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_token = api_token
        self._timeout = timeout
        self._transport = transport
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            headers = {"Accept": "application/json"}
            if self._api_token:
                headers["Authorization"] = f"Bearer {self._api_token}"
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def get_instance(self, instance_id: str) -> InstanceSnapshot:
        client = self._get_client()
        path = f"/internal/instances/{quote(instance_id, safe='')}"

        try:
            response = await client.get(path)
        except httpx.HTTPError as e:
            logger.error(f"[api_loader] Request failed for instance={instance_id}: {e}")
            raise LoaderError(f"Request failed: {e}") from e

        if response.status_code == 404:
            raise InstanceNotFoundError(instance_id)
        if not response.is_success:
            raise LoaderError(
                f"Unexpected status {response.status_code} loading instance {instance_id}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise LoaderError(f"Invalid JSON for instance {instance_id}") from e

        return parse_snapshot(data, source=f"{self._base_url}{path}")

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ApiInstanceLoader":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
