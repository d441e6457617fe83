"""
Experiment runners.

This module provides:
- cv_runner: K-fold cross-validation driver and final model fit
- runner: Partition, CV and thresholdout release for a set of models
"""
