"""Throughput statistics for the school network simulation.

This module provides the periodic throughput sampler and the writers for
the time series and the end-of-run summary.
"""
