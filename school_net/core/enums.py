"""Enumerations for the school network simulation.

This module defines enumerations used throughout the simulator.
"""

from enum import Enum


class TrafficClass(Enum):
    """Differentiated traffic classes carried by the network.

    Attributes:
        VIDEO: Constant bit rate video, expedited forwarding.
        BURSTY: Interactive bursts, medium priority.
        WEB_BACKGROUND: Always-on background web traffic, best effort.
        WEB_STANDARD: Normal web browsing.
    """

    VIDEO = "Video"
    BURSTY = "Bursty"
    WEB_BACKGROUND = "WebBackground"
    WEB_STANDARD = "WebStandard"

    @property
    def label(self) -> str:
        return self.value


class Transport(Enum):
    """Transport reliability mode of a traffic class."""

    UNRELIABLE = "udp"
    RELIABLE = "tcp"


class SourceState(Enum):
    """States of the On/Off traffic source."""

    IDLE = 0
    TRANSMITTING = 1


class HostRole(Enum):
    """Role of a host in the school topology."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"
    LAB = "lab"
    GUEST = "guest"
    ROUTER = "router"
    SERVER = "server"
