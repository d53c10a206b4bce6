"""Domain layer — roles, identifiers, record protocol and errors.

This layer depends only on stdlib.
It must never import from models, strategies, infrastructure, services or commands.
"""
