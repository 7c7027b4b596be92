"""
Policy Store — in-memory registry of enforcement policies keyed by name.

Seeded from a JSON file holding a list of EnforcementPolicy manifests.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Dict, List, Optional

import structlog

from .models import Policy

logger = structlog.get_logger(__name__)


class PolicyStore:

    def __init__(self):
        self._lock = threading.Lock()
        self._policies: Dict[str, Policy] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_file(cls, path: Path) -> "PolicyStore":
        """Missing file → empty store. Invalid manifests raise ValidationError."""
        store = cls()
        if not path.exists():
            return store
        manifests = json.loads(path.read_text())
        for manifest in manifests:
            store.put(Policy.from_manifest(manifest))
        logger.info("policies_loaded", path=str(path), count=len(store))
        return store

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def put(self, policy: Policy) -> bool:
        """Create or replace; returns True when the policy is new."""
        with self._lock:
            created = policy.name not in self._policies
            self._policies[policy.name] = policy
        logger.info("policy_saved", policy=policy.name, created=created)
        return created

    def get(self, name: str) -> Optional[Policy]:
        with self._lock:
            return self._policies.get(name)

    def delete(self, name: str) -> bool:
        with self._lock:
            removed = self._policies.pop(name, None) is not None
        if removed:
            logger.info("policy_deleted", policy=name)
        return removed

    def all(self) -> List[Policy]:
        with self._lock:
            return sorted(self._policies.values(), key=lambda p: p.name)

    def __len__(self) -> int:
        with self._lock:
            return len(self._policies)
