"""Error taxonomy shared by every stage of the pipeline.

Only :func:`cloudwatch_auto.app.main` turns these into a process exit status.
"""


class AutoWatchError(Exception):
    """Base class for every fatal condition raised by cloudwatch-auto."""


class ConfigError(AutoWatchError):
    """A mandatory option is missing or the requested action is unknown."""


class ProviderQueryError(AutoWatchError):
    """
    A list/describe/tag/create call against AWS failed.

    Args:
        message (str): Human readable description of what was being attempted.
        operation (str): The provider operation name, e.g. ``PutMetricAlarm``.
        cause (Exception): The underlying botocore error, if any.
    """
    def __init__(self, message: str, operation: str = "", cause: Exception | None = None):
        super().__init__(message)
        self.operation = operation
        self.cause = cause


class ApplyFailure(ProviderQueryError):
    """
    Applying alarms or marker tags failed part way through a run.

    Args:
        family (str): The family that was being applied when the failure occurred.
        applied (list): Families that were fully applied before the failure.
        cause (ProviderQueryError): The provider failure that stopped the run.
    """
    def __init__(self, family: str, applied: list, cause: ProviderQueryError):
        super().__init__(
            f"Error adding {family} alarms: {cause}",
            operation=cause.operation,
            cause=cause.cause,
        )
        self.family = family
        self.applied = applied


class MalformedInputFile(AutoWatchError):
    """The alarm file given to ``addAlarmsFromFile`` cannot be read or parsed."""
    def __init__(self, path: str, reason: str, cause: Exception | None = None):
        super().__init__(f"Could not parse {path}: {reason}")
        self.path = path
        self.cause = cause


class ProgrammingInvariantViolation(AutoWatchError):
    """A provider response lacks the identifying field a resource must carry."""
