"""
c4online.interfaces - User interfaces for the c4online client

This package contains the render sink contract and the terminal interface.
"""

# Don't import anything here to avoid circular imports
__all__ = []
