"""invariant_error_codes package.

Rewrites ``invariant(condition, message, *args)`` calls so production
builds ship short registry codes instead of message text.

This initializer is intentionally lightweight: public names are
resolved lazily so importing the runtime helpers does not pull in
libcst or the CLI.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

__version__ = "2026.0.1"
__author__ = "Jim Schilling"
__description__ = "Replace invariant messages with registry error codes in production branches"

# Public API names. Submodules are imported lazily when accessed.
__all__ = [
    "main",
    "cli",
    "rewrite",
    "rewrite_source",
    "RewriteConfig",
    "RegistrySnapshot",
    "Result",
    "ResultStatus",
    "InvariantRewriteTransformer",
    "invariant",
    "prod_invariant",
    "InvariantViolation",
    # Exceptions
    "RewriteError",
    "RegistryUnreadable",
    "MessageNotStaticallyFoldable",
    "UnsupportedCallSite",
    "TransformationError",
    "ParseError",
    "ValidationError",
    "ConfigurationError",
]


def __getattr__(name: str):
    """Lazily import submodules/attributes on demand."""
    import importlib

    mapping = {
        "main": "invariant_error_codes.main",
        "cli": "invariant_error_codes.cli",
        "rewrite": "invariant_error_codes.main",
        "rewrite_source": "invariant_error_codes.main",
        "RewriteConfig": "invariant_error_codes.context",
        "RegistrySnapshot": "invariant_error_codes.registry",
        "Result": "invariant_error_codes.result",
        "ResultStatus": "invariant_error_codes.result",
        "InvariantRewriteTransformer": "invariant_error_codes.transformers.invariant_transformer",
        "invariant": "invariant_error_codes.runtime",
        "prod_invariant": "invariant_error_codes.runtime",
        "InvariantViolation": "invariant_error_codes.runtime",
        # Exceptions
        "RewriteError": "invariant_error_codes.exceptions",
        "RegistryUnreadable": "invariant_error_codes.exceptions",
        "MessageNotStaticallyFoldable": "invariant_error_codes.exceptions",
        "UnsupportedCallSite": "invariant_error_codes.exceptions",
        "TransformationError": "invariant_error_codes.exceptions",
        "ParseError": "invariant_error_codes.exceptions",
        "ValidationError": "invariant_error_codes.exceptions",
        "ConfigurationError": "invariant_error_codes.exceptions",
    }

    if name not in mapping:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module = importlib.import_module(mapping[name])

    # For 'main' and 'cli' we return the module itself.
    if name in {"main", "cli"}:
        return module
    return getattr(module, name)


def __dir__():
    return sorted(list(globals().keys()) + __all__)
