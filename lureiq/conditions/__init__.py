"""
Condition normalizer.

normalizer : pure inference of time of day, season, clarity and spawn phase
service    : ConditionsService — location + weather + fallbacks, never raises
"""
