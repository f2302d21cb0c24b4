"""Service layer package for application domain logic.

This package contains higher-level services that orchestrate DB access,
report rendering, external lookups and cron scheduling.
"""
