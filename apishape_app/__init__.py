"""Negotiate which API schema revision a service serves a resource kind under."""

__version__ = "1.0.0"

from .capability import supports_kind
from .exceptions import NegotiationError, NoMatchError, ProbeError, ShapeError
from .negotiation import negotiate
from .shapes import APIShape, identifier_of

__all__ = [
    "APIShape",
    "NegotiationError",
    "NoMatchError",
    "ProbeError",
    "ShapeError",
    "identifier_of",
    "negotiate",
    "supports_kind",
]
