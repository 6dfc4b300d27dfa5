"""External-process exchange: resolve, encode, launch and decode."""

from .deadline import Deadline
from .decoder import decode_result
from .errors import ExchangeError, ExchangeErrorKind
from .launcher import ProcessLauncher
from .orchestrator import CompletedExchange, ExchangeInput, ExchangeOrchestrator
from .program import ResolvedProgram, resolve_program
from .query import encode_query

__all__ = [
    "CompletedExchange",
    "Deadline",
    "ExchangeError",
    "ExchangeErrorKind",
    "ExchangeInput",
    "ExchangeOrchestrator",
    "ProcessLauncher",
    "ResolvedProgram",
    "decode_result",
    "encode_query",
    "resolve_program",
]
