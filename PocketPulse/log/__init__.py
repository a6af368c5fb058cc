"""
Logging subsystem: handlers, models, and views for application logging.

Modules:

- :mod:`PocketPulse.log.log` – Root logger setup, Qt message routing and the in-memory TankHandler.
- :mod:`PocketPulse.log.model` – Table model and proxy for displaying and filtering in-memory logs.
- :mod:`PocketPulse.log.view` – Qt view and dock widget for browsing log messages.
"""
