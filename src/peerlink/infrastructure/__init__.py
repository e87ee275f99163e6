"""Infrastructure layer — database engine, repositories, and the store.

This layer depends on stdlib, SQLAlchemy, and the domain layer.
It must never import from services, commands, or output.
"""
