"""
Itinerary recommendation engine.

Responsibilities:
- Build one filtered candidate pool per request from collaborator records.
- Rank candidates by an optimisation strategy (budget, activity, comfort, time).
- Greedily allocate destinations under the budget and trip-length limits.
- Apply optional enhancement preferences without breaking those limits.
- Compare every strategy over the same pool.
"""
