"""
PocketPulse data package: transaction types, transforms, models, and views.

This package provides:

- :mod:`PocketPulse.data.data` – Transaction and Summary types, the list transform (:func:`PocketPulse.data.data.filter_transactions`) and the 7-day series (:func:`PocketPulse.data.data.get_series`).
- :mod:`PocketPulse.data.model` – Qt table model for the filtered transaction list.
- :mod:`PocketPulse.data.view` – Qt views for the form, table, summary figures and history chart.
"""
