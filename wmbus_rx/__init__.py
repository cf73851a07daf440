"""Wireless M-Bus T-mode coding, frame checking, CC1101 control and Techem meter decoding."""

__version__ = "0.1.0"