"""Authentication and authorization.

Learn: Three layers, leaves first:
1. password.py — bcrypt hashing for passwords and refresh tokens
2. jwt.py — TokenService issues/verifies access and refresh tokens
3. dependencies.py — the bearer-token guard used as Depends() on routes

ownership.py holds the single authorization rule: only the recorded
author of a resource may change it.
"""
