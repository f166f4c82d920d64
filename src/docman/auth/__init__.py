"""Authentication and authorization.

Learn: Three pieces, leaves first:
1. tokens: sign/verify a user snapshot with the server secret (PyJWT)
2. dependencies: the gate. Finds the token on the request, verifies it,
   attaches the identity
3. policy: pure allow/deny decisions over (actor, target)

Passwords are bcrypt-hashed (password.py); the token never carries them.
"""
