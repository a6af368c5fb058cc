"""Qt table models for the PocketPulse application.

This subpackage provides the TransactionsModel displaying the filtered,
newest-first transaction list of the latest refresh.
"""
