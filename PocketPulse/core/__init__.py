"""
Core package for PocketPulse.

This package includes:

- :mod:`PocketPulse.core.service` – The server gateway: list, create and delete transactions and fetch the summary, degrading to safe defaults on failure.
- :mod:`PocketPulse.core.refresh` – The refresh manager: view state, the single refresh entry point and stale-result discarding.
"""
