"""
Idle Skills Test Suite
======================

Test Organization
-----------------
- tests/unit/          : Fast unit tests against the in-memory store
- tests/integration/   : PostgreSQL tests via testcontainers

Use pytest markers (``integration``, ``database``) to select suites.
"""
