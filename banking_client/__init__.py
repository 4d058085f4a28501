"""
Banking Web Client

An asyncio client for the stateless banking REST API with a transient
in-memory session, a three-section view state machine and auto-expiring
user notifications.
"""

__version__ = "1.0.0"
