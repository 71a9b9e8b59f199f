"""Deterministic composition: step planning and continuation-chain synthesis."""
from __future__ import annotations

from .chain import Bridge, ChainSynthesizer, Continuation, ContinuationChain, HostCapture, NextBridge
from .planner import CompositionPlan, CompositionPlanner, TerminalRule
from .steps import CompositionStep, PlannedStep, TerminalStep

__all__ = [
    "Bridge",
    "ChainSynthesizer",
    "Continuation",
    "ContinuationChain",
    "HostCapture",
    "NextBridge",
    "CompositionPlan",
    "CompositionPlanner",
    "TerminalRule",
    "CompositionStep",
    "PlannedStep",
    "TerminalStep",
]
