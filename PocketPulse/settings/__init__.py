"""
Settings package: configuration API and locale helpers.

This package provides:

- :mod:`PocketPulse.settings.lib` – Core settings management and schema validation.
- :mod:`PocketPulse.settings.locale` – Localization utilities for currency formatting.
"""
