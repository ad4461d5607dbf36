"""Pydantic models for request/response I/O."""

from .optimize import (
    LineupPickResponse,
    NoSolutionResponse,
    OptimizeRequest,
    OptimizeResponse,
    WeightsPayload,
)

__all__ = [
    "LineupPickResponse",
    "NoSolutionResponse",
    "OptimizeRequest",
    "OptimizeResponse",
    "WeightsPayload",
]
