"""
Utility functions module.

Time Semantics:
- All stored timestamps are timezone-aware UTC
- The once-per-day guarantee uses the calendar day in the scheduler's
  configured time zone, not the UTC date
"""
