"""
API Routers
Separate router modules for each domain.
"""

from app.routers import solc

__all__ = ["solc"]
