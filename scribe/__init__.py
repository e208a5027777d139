"""
Scribe - a multi-user publishing service.

Users register and log in, author posts, and engage with other people's
posts through comments and likes.
"""

__version__ = "0.1.0"
