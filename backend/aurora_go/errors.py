"""Failure categories for upstream data and notification delivery.

None of these escape the decision pipeline: the ingest layer turns them into
degraded readings or neutral defaults, and the scheduler logs them.
"""


class UpstreamUnavailable(Exception):
    """Network error, timeout or non-2xx response from a collaborator."""


class MalformedData(ValueError):
    """Payload parsed but required fields are missing or non-numeric."""


class NoValidData(MalformedData):
    """Row filtering left nothing usable in a telemetry stream."""


class DispatchFailure(Exception):
    """Notification transport rejected or failed to deliver a message."""
