"""
User Service

Role-gated user registry for the score ledger.

Features:
- User records keyed by caller-assigned numeric id (phone + score balance)
- Manager-only creation, update and score top-up
- Score debit capability for the order ledger
- Role administration (admin / manager) per deployment
- Event-driven audit trail of every committed mutation
"""

__version__ = "1.0.0"
