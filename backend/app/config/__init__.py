"""
Configuration module for the contract analysis backend
"""

from .settings import Settings, get_settings

__all__ = [
    'Settings',
    'get_settings'
]
