"""Authentication and session identity.

Learn: One authentication path, end to end:
1. Login: email/password → Argon2id verify (password.py) → signed JWT (jwt.py)
2. Every protected request: Authorization header → bearer token (bearer.py)
   → verified claim → CurrentIdentity on the request (dependencies.py,
   applied by dissipate.middleware.identity)

Stateless: nothing about issued tokens is stored server-side.
"""
