"""
Operations reporting service package.

Pulls policy production, claims and urgent service tickets from the upstream
APIs, aggregates them over a reporting period (previous day, previous week,
previous month), renders a spreadsheet and delivers a summary by e-mail and
through a messaging workspace.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, error taxonomy and HTTP session lifecycle
    - models: Enums, run-scoped dataclasses and pydantic schemas
    - services: Period aggregation pipeline and spreadsheet rendering
    - jobs: Delivery channels, failure reporting, run orchestration and scheduling
"""

__version__ = "1.0.0"
