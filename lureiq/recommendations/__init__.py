"""
Recommendation engine: converts confirmed conditions into one lure pick.

Modules
-------
rules  : Rule dataclass + the five rule groups (cover, clarity, time,
         season, spawn) — data plus predicates, no I/O.
scorer : compute_scores() + select_winner() + score() + build_reasoning()
         — pure functions, tie-break randomness injected by the caller.
"""
