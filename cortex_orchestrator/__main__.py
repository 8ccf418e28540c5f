"""
CORTEX Orchestrator entrypoint.

Usage:
    python -m cortex_orchestrator
"""

from cortex_orchestrator.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
