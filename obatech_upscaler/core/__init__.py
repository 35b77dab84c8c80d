"""Core upscale pipeline components."""

from .validator import InputValidator
from .encoder import TransportEncoder
from .request_builder import RequestBuilder
from .interpreter import ResponseInterpreter
from .orchestrator import UpscaleOrchestrator

__all__ = [
    "InputValidator",
    "TransportEncoder",
    "RequestBuilder",
    "ResponseInterpreter",
    "UpscaleOrchestrator",
]
