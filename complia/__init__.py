"""Complia - Compliance Scheduling Engine.

Complia computes recurring regulatory due dates for the entities a firm
manages and turns them into work items, exactly once per obligation per
period.

Architecture Overview:
- **API Layer**: FastAPI routers for generation, assignment and previews
- **Core Layer**: Configuration, logging, exceptions and tracing
- **Domain Layer**: Holiday calendar, due date calculator, applicability
  matcher and task generator
- **Infrastructure Layer**: PostgreSQL persistence through SQLAlchemy 2.0

The domain layer depends only on the small ports it declares, so the date
arithmetic and the generation algorithm can be exercised without a database.
"""
