"""Domain layer for fincontrol application.

Services are imported from their own modules (``fincontrol.domain.entry``,
``fincontrol.domain.summary`` and so on) so the database layer can import
the entities without pulling the services in.
"""
