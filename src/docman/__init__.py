"""Docman — document management backend.

User accounts, roles, and documents over HTTP. The interesting part is
the auth layer: bearer tokens issued at login, verified on every
protected request, and per-action access policy.
"""

__version__ = "0.1.0"
