'''
Marketing Analytics Test Suite

Test Modules:
-------------
- test_normalization.py: safe numeric coercion and row decoders
- test_period.py: presets, explicit ranges, legacy codes, comparison window
- test_taxonomy.py: source label to canonical channel
- test_anomaly.py: mean + 2 sigma spike rule
- test_kpi.py: KPI ratios, drift protection, funnel fallback, comparisons
- test_listings.py: page merge, sources, timeseries, breakdowns, health
- test_report.py: concurrent report assembly and failure handling
- test_database.py: asyncpg adapter and settings
- test_api.py: HTTP contract of the overview endpoint

Running Tests:
--------------
    pip install -e ".[test]"
    pytest marketing_analytics/tests/ -v

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

__all__ = []
