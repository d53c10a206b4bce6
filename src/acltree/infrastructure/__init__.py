"""Infrastructure layer — database, store, hierarchy graph.

This layer depends on stdlib and third-party libs (SQLAlchemy, NetworkX).
"""
