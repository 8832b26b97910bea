"""
MPRIS WebSocket Bridge
Exposes the status of a local MPRIS2 media player to WebSocket clients
"""

__version__ = '0.3.0'
