"""
Lead Intelligence Backend Package.

FastAPI service layer that turns merged company text (news, press releases,
social content) into a three-part executive search intelligence report.

Subpackages:
    - api: FastAPI route handlers (analysis, health check, admin quota endpoints)
    - core: Configuration, database pool, dependencies and error taxonomy
    - models: Pydantic schemas and enums
    - services: Quota ledger, identity verification, generative backend, invoker
    - sql: Parameterized SQL for the profiles quota table
    - client: Caller-side adapter, health check and local history store
"""

__version__ = "1.0.0"
