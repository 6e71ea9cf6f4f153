# mc_server_runner/core/flavor.py
"""The closed set of server distributions the runner knows how to deploy."""

from enum import Enum

from ..error import ConfigurationError


class Flavor(Enum):
    PAPER = "paper"
    VELOCITY = "velocity"
    FOLIA = "folia"
    SPIGOT = "spigot"

    @classmethod
    def parse(cls, value: str) -> "Flavor":
        """Returns the flavor named by ``value`` (case-insensitive)."""
        normalized = (value or "").strip().lower()
        for flavor in cls:
            if flavor.value == normalized:
                return flavor
        valid = ", ".join(f.value for f in cls)
        raise ConfigurationError(
            f"Unknown PROJECT_NAME '{value}'. Expected one of: {valid}."
        )

    @property
    def title(self) -> str:
        return self.value.capitalize()

    @property
    def tag(self) -> str:
        """Bracketed prefix used in operator-facing log messages."""
        return f"[{self.title}]"

    @property
    def is_proxy(self) -> bool:
        return self is Flavor.VELOCITY

    @property
    def carries_version(self) -> bool:
        """Whether a game-version change should trigger a world backup."""
        return self in (Flavor.PAPER, Flavor.FOLIA, Flavor.SPIGOT)

    def __str__(self) -> str:
        return self.value
