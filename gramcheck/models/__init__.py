"""
Models Package

Exports all models for easy importing.
"""

from gramcheck.models.user import User
from gramcheck.models.storage import StorageEntry

__all__ = ['User', 'StorageEntry']
