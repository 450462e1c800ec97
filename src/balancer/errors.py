"""
Balancer Error Types.

Configuration errors mean an ownership declaration or team roster is broken and
must be fixed by a human. Transport errors mean a platform or store call failed;
the next scheduled cycle is the retry. A missing reviewer or an empty candidate
pool is never an error.
"""


class BalancerError(Exception):
    """Base class for all reviewer balancing failures."""


class ConfigurationError(BalancerError):
    """Ownership or roster configuration cannot be resolved."""


class TeamNotFoundError(ConfigurationError):
    """An ownership declaration references a team the team store does not know."""

    def __init__(self, team_name: str):
        super().__init__(f"team {team_name!r} not found in team store")
        self.team_name = team_name


class OwnershipFileError(ConfigurationError):
    """An ownership declaration could not be read as text or is malformed."""


class TransportError(BalancerError):
    """A pull request platform or store call failed."""
