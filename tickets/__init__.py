"""tickets/ -- Ticket records, their store, and the lifecycle rules.

Layer rule: tickets/ may import from core/ and auth/models.py only.
"""
