"""Main entry point for running invariant-error-codes as a module.

This allows users to run the CLI with:
    python -m invariant_error_codes [command] [options]
"""

from .cli import main

if __name__ == "__main__":
    main()
