"""
Setup State Management

Remembers whether setup completed, so that later starts can skip the
startup-only checks.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from .preflight.models import NetworkMode

logger = logging.getLogger(__name__)


class SetupState:
    """
    Setup completion marker.

    State is saved to <home>/setup_state.json. Only the completion time and
    the network mode used are stored.
    """

    STATE_FILENAME = "setup_state.json"

    def __init__(self, state_dir: Path):
        """
        Initialize setup state.

        Args:
            state_dir: Directory for the state file
        """
        self.state_dir = Path(state_dir)
        self.state_file = self.state_dir / self.STATE_FILENAME

        self.completed_at: Optional[str] = None
        self.network_mode: Optional[NetworkMode] = None

    @property
    def setup_completed(self) -> bool:
        return self.completed_at is not None

    def is_cold_start(self, network_mode: NetworkMode) -> bool:
        """
        Whether a start must run the full set of checks.

        True until setup completed, and again after the network mode changed.
        """
        if not self.setup_completed:
            return True
        return self.network_mode != network_mode

    def mark_setup_completed(self, network_mode: NetworkMode) -> None:
        self.completed_at = datetime.now().isoformat()
        self.network_mode = network_mode
        self.save()

    def clear(self) -> None:
        """Forget setup completion and remove the state file."""
        self.completed_at = None
        self.network_mode = None
        if self.state_file.exists():
            self.state_file.unlink()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "completed_at": self.completed_at,
            "network_mode": self.network_mode.value if self.network_mode else None,
        }

    def save(self) -> None:
        """Save state to file."""
        self.state_dir.mkdir(parents=True, exist_ok=True)
        with open(self.state_file, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, state_dir: Path) -> "SetupState":
        """
        Load state from file.

        A missing or unreadable file yields an empty state, which makes the
        next start a cold start.
        """
        state = cls(state_dir)
        if not state.state_file.exists():
            return state

        try:
            with open(state.state_file, "r") as f:
                data = json.load(f)
            state.completed_at = data.get("completed_at")
            mode = data.get("network_mode")
            state.network_mode = NetworkMode(mode) if mode else None
        except (json.JSONDecodeError, OSError, ValueError, AttributeError) as e:
            logger.warning("Ignoring unreadable setup state %s: %s", state.state_file, e)
            state.completed_at = None
            state.network_mode = None
        return state
