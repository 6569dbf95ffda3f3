"""
Database init - Exports
"""

from .base import Base, AuditMixin

__all__ = ["Base", "AuditMixin"]
