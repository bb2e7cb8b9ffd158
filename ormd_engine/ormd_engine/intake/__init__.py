"""
Intake layer: text ⇄ OrmdDocument → ContextBundle.
"""
from .parser import parse, is_valid_iso8601
from .serializer import serialize
from .projector import ProjectionPolicy, to_bundle, to_context_bundle

__all__ = [
    "parse",
    "is_valid_iso8601",
    "serialize",
    "ProjectionPolicy",
    "to_bundle",
    "to_context_bundle",
]
