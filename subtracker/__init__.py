"""
Subscription Tracker - Core Package

Domain layer of a personal subscription tracker: subscription records,
renewal date projection, calendar and spending summaries, and a
write-through cache over the backend.

DESIGN PRINCIPLES:
1. Renewal dates are derived, never stored
2. Fail early on malformed billing data
3. The backend owns the records; the cache follows it
4. Every mutation is auditable
"""

__version__ = "1.0.0"
