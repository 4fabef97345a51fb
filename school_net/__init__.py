"""School network traffic simulation.

Discrete-event model of a school network carrying four differentiated
traffic classes towards a single Internet server, with per-class
throughput measurement.
"""

__version__ = "0.1.0"
