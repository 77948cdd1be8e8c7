"""Rental operations back office.

This package holds the business core of a car rental back office: booking
reservations and driving them through pickup, return and settlement, manager
approval, fee calculation, and importing master data from spreadsheets.

Subpackages
-----------

- ``rentacar_ops.core``: configuration, logging, errors and the pydantic
  domain and I/O models.
- ``rentacar_ops.pricing``: rate plan selection and fee calculation.
- ``rentacar_ops.reservations``: the status transition table and
  ``ReservationService``.
- ``rentacar_ops.approvals``: single and bulk approval decisions.
- ``rentacar_ops.importing``: CSV/Excel parsing, row mappers and
  ``ImportService``.
- ``rentacar_ops.events``: the in-process domain event bus.
- ``rentacar_ops.repos``: repository protocols and their async SQLAlchemy
  implementations.

``rentacar_ops.app.create_app`` wires all of these together.
"""

__version__ = "0.1.0"
