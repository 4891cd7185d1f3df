"""
Order Service - score-billed order ledger

Creates billable orders for registered users and settles them by debiting
the user's score through the user registry.
"""

__version__ = "1.0.0"
