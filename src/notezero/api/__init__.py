"""HTTP surface: JSON routes over the workspace."""

from notezero.api.router import router

__all__ = ["router"]
