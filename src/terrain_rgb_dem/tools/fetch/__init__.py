from .api import register_fetch_tools

__all__ = ["register_fetch_tools"]
