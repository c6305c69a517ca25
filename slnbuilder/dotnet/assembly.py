"""Assembly-identity-to-project mapping for reference resolution."""

from __future__ import annotations

import logging

from slnbuilder.config import LEGACY_FRAMEWORK, MODERN_FRAMEWORK, ProjectDescriptor

logger = logging.getLogger(__name__)


class AssemblyIndex:
    """Maps assembly identities to the source projects that build them.

    Populated by scanning search roots for project files. The first project
    registered for an identity wins; later duplicates are dropped.
    """

    def __init__(self) -> None:
        self.identity_map: dict[str, ProjectDescriptor] = {}

    def __len__(self) -> int:
        return len(self.identity_map)

    def __contains__(self, identity: str) -> bool:
        return identity in self.identity_map

    def register(self, descriptor: ProjectDescriptor) -> bool:
        """Register a project under its identity. Returns False if the identity was taken."""
        existing = self.identity_map.get(descriptor.identity)
        if existing is not None:
            logger.debug(
                f"Duplicate assembly {descriptor.identity}: keeping {existing.path}, "
                f"dropping {descriptor.path}"
            )
            return False
        self.identity_map[descriptor.identity] = descriptor
        return True

    def get(self, identity: str) -> ProjectDescriptor | None:
        return self.identity_map.get(identity)

    def lookup(self, identity: str) -> list[ProjectDescriptor]:
        """Resolve an assembly identity to zero, one or two projects.

        Tries an exact match first. Failing that, the identity is assumed to
        name a native project built for both framework generations: the
        ``<identity>.net472`` project is returned, followed by its
        ``<identity>.net6.0-windows`` sibling when one is indexed.
        """
        # Exact match
        exact = self.get(identity)
        if exact is not None:
            return [exact]

        legacy_key = f"{identity}.{LEGACY_FRAMEWORK}"
        legacy = self.get(legacy_key)
        if legacy is None:
            return []

        matches = [legacy]
        modern = self.get(legacy_key.replace(LEGACY_FRAMEWORK, MODERN_FRAMEWORK))
        if modern is not None:
            matches.append(modern)
        return matches

    def get_all_identities(self) -> dict[str, str]:
        """Return the identity-to-path mapping."""
        return {identity: d.path for identity, d in self.identity_map.items()}
