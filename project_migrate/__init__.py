"""
Project Migration Application

Migrates a complete data-platform project (configurations, buckets, tables,
writers and secrets) from a source project into an empty destination project.

Drives the backend services that do the actual work:
- Project backup / restore
- Direct table data migration
- Secret re-encryption (configurations with encrypted values)
- Snowflake writer and orchestration migration
"""

__version__ = "0.1.0"
