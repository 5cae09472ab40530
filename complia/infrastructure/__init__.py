"""Infrastructure layer: PostgreSQL persistence behind the scheduling ports.

- **database**: engine, sessions, ORM models and repositories
- **audit**: database-backed audit sink
"""
