"""
Services - the operations behind the HTTP routes.
"""

from scribe.services.posts import PostService

__all__ = [
    "PostService",
]
