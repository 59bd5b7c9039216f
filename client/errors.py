"""Exception hierarchy for the speed test client."""


class SpeedTestError(Exception):
    """Base class for every error raised by the client library."""


class ConfigError(SpeedTestError, ValueError):
    """A configuration value is malformed or out of range."""


class TransportError(SpeedTestError):
    """The connection to the server failed or returned an error status."""


class DeadlineExceeded(SpeedTestError):
    """A sub-test did not finish within its time budget."""

    def __init__(self, seconds: float) -> None:
        super().__init__(f"Deadline reached after {seconds:g} s")
        self.seconds = seconds
