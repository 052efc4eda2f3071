"""Lateness System package.

Feature modules (tiers, packages, events, deductions, analytics) keep the
business rules; Flask controllers are a thin layer over the services.
"""
