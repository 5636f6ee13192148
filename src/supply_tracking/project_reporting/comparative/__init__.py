"""
Comparative (machine vs machine) project dashboard.

Kept apart from the detail analytics path so that:
- schedule/delay logic never feeds back into the percentage engine
- the detail summary stays the single source of the five metrics
"""
