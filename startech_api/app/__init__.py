"""
Application package initializer.

The backend is split by layer rather than by feature: ``core`` holds
configuration, logging, the database handle and identity helpers,
``schemas`` the request payloads, ``services`` the business logic and
``api`` the HTTP routers.  Each business domain (orders, services,
tasks, tickets, ...) has one service class and one router module.
"""

from .main import app  # noqa: F401
