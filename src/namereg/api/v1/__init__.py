"""
API v1 package.

Contains versioned API routes for the name registration API.
"""

from namereg.api.v1.routes import router

__all__ = ["router"]
