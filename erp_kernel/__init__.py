"""
ERP Kernel

Shared infrastructure for the ERP modules:
- Declarative ORM base and unit-of-work session scope
- Typed business exceptions with machine-readable codes
- Structured JSON logging
- In-process domain event bus
- Workflow (state machine) value objects
"""

__version__ = "0.1.0"
