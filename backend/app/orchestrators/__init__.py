"""
Orchestrators for contract analysis
"""

from .processing_orchestrator import ProcessingOrchestrator, ProcessingStats

__all__ = [
    'ProcessingOrchestrator',
    'ProcessingStats'
]
