"""Timekeeping package.

Feature modules (users, attendance, leaves, reports) each carry a model,
a repository interface with its MySQL implementation, a service holding the
business rules and a thin Flask controller.
"""
