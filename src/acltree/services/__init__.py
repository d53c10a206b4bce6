"""Service layer — ServiceResult-returning operations for the CLI.

Services catch the domain exceptions of :mod:`acltree.domain.errors` and
turn them into structured errors. Library callers use the collections
directly and get the exceptions.
"""
