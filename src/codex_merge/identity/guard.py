from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from codex_merge.logger import get_logger

log = get_logger("identity_guard")


@dataclass
class IdentityGuard:
    """
    Run-wide identity space.

    Keys are claimed per namespace; the first claim wins and every later claim
    for the same key is refused. Owners are kept for collision messages.
    """
    owners: Dict[str, Dict[str, str]] = field(default_factory=dict)

    def claim(self, namespace: str, key: str, owner: str) -> bool:
        space = self.owners.setdefault(namespace, {})
        if key in space:
            log.debug(
                "Refused claim for %s in %s by %s (held by %s)",
                key, namespace, owner, space[key],
            )
            return False
        space[key] = owner
        return True

    def owner_of(self, namespace: str, key: str) -> Optional[str]:
        return self.owners.get(namespace, {}).get(key)

    def size(self, namespace: Optional[str] = None) -> int:
        if namespace is not None:
            return len(self.owners.get(namespace, {}))
        return sum(len(space) for space in self.owners.values())
