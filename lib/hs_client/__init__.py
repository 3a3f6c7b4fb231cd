from .client import HostRunner
from .errors import EnvError, HsClientError, LaunchError, NonZeroExit, ParseError

__all__ = ["HostRunner", "HsClientError", "EnvError", "LaunchError", "NonZeroExit", "ParseError"]
