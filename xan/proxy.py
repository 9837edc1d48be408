"""
Upgradeable Proxy

Holds the identity of the active implementation and performs the switch.
The proxy knows nothing about governance: it calls the injected
``authorize_upgrade`` callback first and lets any exception propagate, so a
rejected upgrade leaves the proxy untouched.
"""

from typing import Any, Callable, Dict, List, Optional

from .logger import get_logger

logger = get_logger(__name__)

AuthorizeUpgrade = Callable[[str], Any]
OnUpgraded = Callable[[str, str], None]


class UpgradeableProxy:
    """
    Args:
        implementation:     Initially active implementation identity
        authorize_upgrade:  Callable(candidate); raises to reject
        on_upgraded:        Callable(previous, new), run after the switch
    """

    def __init__(
        self,
        implementation: str,
        authorize_upgrade: AuthorizeUpgrade,
        on_upgraded: Optional[OnUpgraded] = None,
    ):
        self._implementation = implementation
        self._authorize_upgrade = authorize_upgrade
        self._on_upgraded = on_upgraded
        self._history: List[str] = [implementation]

    @property
    def implementation(self) -> str:
        return self._implementation

    @property
    def history(self) -> List[str]:
        return list(self._history)

    def upgrade_to(self, candidate: str) -> str:
        """Switch to *candidate* if authorized; returns the previous implementation."""
        self._authorize_upgrade(candidate)

        previous = self._implementation
        self._implementation = candidate
        self._history.append(candidate)
        logger.info(f"Upgraded: {previous} → {candidate}")

        if self._on_upgraded is not None:
            self._on_upgraded(previous, candidate)
        return previous

    def to_dict(self) -> Dict[str, Any]:
        return {
            "implementation": self._implementation,
            "upgrades": len(self._history) - 1,
        }

    def __repr__(self) -> str:
        return f"<UpgradeableProxy implementation={self._implementation}>"
