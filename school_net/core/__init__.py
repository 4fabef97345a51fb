"""Core components for the school network simulation.

This module contains the event scheduler, the topology and network stack
boundaries, and the flow sinks that count received traffic.
"""
