"""
Reusable holdout cross-validation engine.

This package provides:
- data: Dataset contract, seeded K+1 fold partition, index-based replicates
- models: Pluggable Model / Predictor interface and bundled adapters
- evaluation: 0/1 error metrics and the thresholdout release mechanism
- experiments: Cross-validation driver and end-to-end experiment runner
"""

__version__ = "0.1.0"
