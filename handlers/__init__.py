"""
Handlers Module for Whispers.

Contains all web layer handlers (Socket.IO and API) with no business logic.
Handlers coordinate between web layer and the game managers.
"""

from .socket_handlers import register_socket_handlers, make_notifier
from .api_handlers import register_api_handlers

__all__ = [
    'register_socket_handlers',
    'make_notifier',
    'register_api_handlers'
]
