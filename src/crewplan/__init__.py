"""
CrewPlan - Workforce and equipment scheduling for construction companies

This package contains the allocation scheduling and absence conflict engine:
- domain: Entities, error taxonomy, planned-hours calculator
- storage: Async database adapter, ORM models, repositories
- engine: Conflict checker/service, availability analyzer, allocation workflows
- api: FastAPI REST endpoints
- platform: Cross-cutting concerns (configuration, logging)
"""

__version__ = "0.1.0"
