"""
Marketing Analytics Backend Package.

Aggregation engine behind the marketing overview dashboard. Turns raw
engagement, conversion, search-performance and funnel rows into a single
KPI report for an arbitrary date window, with period comparison, anomaly
flags and drift protection against malformed upstream data.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, errors, database pool and dependencies
    - models: Pydantic schemas, enums and decoded row shapes
    - services: Normalization, period resolution, taxonomy, anomaly
      detection, KPI building and report assembly
    - sql: Catalogue of parameterized read-only queries
"""

__version__ = "1.0.0"
