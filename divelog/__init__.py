"""
Divelog - Core logic for the dive log metrics and statistics engine.

This package contains:
- models: Domain models (Dive, DiveSite, Buddy, Trip, ...)
- reference_data: Lookup table kinds (gas mixes, tank configurations, ...)
- dive_metrics: Derived per-dive values (gas used, SAC rate, flags)
- validation: Entity rulesets and the Validator collector
- timezones: Dive site local time to UTC and back
- stats: Aggregate and dimensional rollups of a diver's history
- pagination, sorting: List view paging and ordering
"""
