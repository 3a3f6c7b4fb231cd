from __future__ import annotations


class HsClientError(Exception):
    """Base client error."""


class EnvError(HsClientError):
    """A variable the host runner should have exported is missing."""


class ParseError(HsClientError):
    """Host runner output could not be understood."""


class NonZeroExit(HsClientError):
    def __init__(self, exit_code: int, command: list[str], stderr: str | None = None):
        super().__init__(f"Command `{' '.join(command)}` exit with {exit_code}")
        self.exit_code = exit_code
        self.command = command
        self.stderr = stderr


class LaunchError(HsClientError):
    """The host runner could not be started or did not finish in time."""
