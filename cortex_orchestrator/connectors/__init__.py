"""
Connectors — Integration blocks for external services.

The orchestrator talks to exactly one external service: the n8n
workflow engine.
"""

from cortex_orchestrator.connectors.base_connector import BaseConnector
from cortex_orchestrator.connectors.n8n_connector import AsyncN8nClient, N8nConnector

__all__ = [
    "BaseConnector",
    "AsyncN8nClient",
    "N8nConnector",
]
