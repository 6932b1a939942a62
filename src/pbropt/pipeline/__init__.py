"""Pipeline: stage runner, optimiser client, and request session."""

from pbropt.pipeline.processor import ReconciliationPipeline, ReconciliationResult
from pbropt.pipeline.client import OptimiserClient
from pbropt.pipeline.session import OptimiserOutcome, OptimiserSession

__all__ = [
    'ReconciliationPipeline',
    'ReconciliationResult',
    'OptimiserClient',
    'OptimiserOutcome',
    'OptimiserSession',
]
