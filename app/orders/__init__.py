"""
Orders app: purchase lifecycle, escrow and reconciliation sweeps.
"""
