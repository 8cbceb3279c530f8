"""
ERP Modules.

Each module keeps the same layout:
- models.py     enums and frozen view/input dataclasses (the nouns)
- workflows.py  state machines
- orm.py        SQLAlchemy persistence and aggregate transitions
- service.py    commands (flush, never commit)
- selectors.py  read views with calculated fields
- handlers.py   domain event consumers
- events.py     domain events the module publishes

Modules:
- company:    Companies and their roles (CUSTOMER, VENDOR, OUTSOURCE)
- auth:       Users and role assignment
- project:    Customer jobs with generated job codes
- quotation:  Versioned quotations; acceptance activates the project
- delivery:   Deliveries against a committed quotation
- purchasing: Purchase requests, RFQ vendor selection, purchase orders
- finance:    Accounts payable raised by confirmed purchase orders
- invoice:    Tax invoices and accounts receivable

``erp_modules.wiring.build_unit_of_work`` assembles them over one session.
"""
