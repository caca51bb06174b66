"""Handler modules for watched resources.

Handlers register themselves via @kopf decorators when their module is imported.
"""
