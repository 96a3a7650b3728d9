from .engine import TransferEngine
from .errors import AccountResolutionFailure, AlreadyRunning, StreamError

__all__ = ["TransferEngine", "StreamError", "AlreadyRunning", "AccountResolutionFailure"]
