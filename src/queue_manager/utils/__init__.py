"""
Module: utils
Description: Package initialization for utility functions.

This package contains shared helpers used throughout the queue manager:
- logger: Structured logging configuration and helpers
- batch_helpers: Batch validation, chunking and result merging
"""

__all__ = []
