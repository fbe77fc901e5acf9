"""
Tx - build, sign, broadcast and confirm transactions.

Uses eth-account for signing; confirmation is a fixed-cadence poll loop.
"""
