"""Domain layer for ledgerbook.

Services live in their own modules (``ledgerbook.domain.ledger`` and so on)
and are imported from there; this package only groups them.
"""
