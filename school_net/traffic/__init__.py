"""Traffic generation for the school network simulation.

This module provides the traffic class profiles and the On/Off source that
turns a profile into timed transmissions.
"""
