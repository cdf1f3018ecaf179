"""libcst transformers that rewrite invariant calls.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from .binding import HelperBindingManager, UnitState
from .classifier import CallClassifier, CallKind
from .invariant_transformer import InvariantRewriteTransformer, RewriteStats, rewrite_code, rewrite_module

__all__ = [
    "CallClassifier",
    "CallKind",
    "HelperBindingManager",
    "InvariantRewriteTransformer",
    "RewriteStats",
    "UnitState",
    "rewrite_code",
    "rewrite_module",
]
