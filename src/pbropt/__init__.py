"""`pbropt` - PhotoBioReactor OPTimiser input reconciliation.

Subpackages:
- reconcile: Timestamp parsing, lab series, run segmentation, biomass spline, hourly alignment
- pipeline: Stage runner, optimiser client, session
- schemas: Pydantic configuration layers
- contracts: Stage invariants and the error taxonomy
"""

__version__ = "0.1.0"
