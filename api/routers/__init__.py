"""
API Routers - Organized endpoint handlers for the Divelog API.

Each router handles a specific domain:
- dives: List, read and save dives with derived metrics
- stats: Aggregate and dimensional rollups of a diver's history
- reference_data: Cached lookup tables
"""
