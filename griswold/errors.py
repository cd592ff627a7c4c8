"""Exception types raised by Griswold."""


class GriswoldError(Exception):
    """Base class for all Griswold errors."""


class ProjectLoadError(GriswoldError):
    """A project payload could not be parsed or validated.

    Raised before any store mutation happens, so a failed load never
    leaves the store half-updated.
    """


class MigrationError(ProjectLoadError):
    """A project payload carries a schema version this build cannot upgrade."""
