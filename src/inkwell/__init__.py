"""Inkwell — blogging backend.

Users register and authenticate, publish posts, and comment on posts.
Authentication is JWT-based (access + refresh tokens), authorization is
ownership-based: only the author of a post or comment may change it.
"""

__version__ = "0.1.0"
