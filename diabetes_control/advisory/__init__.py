"""
Remote advisory analysis: prompt construction and the HTTP client.

Any advisory failure surfaces as ``AdvisoryError``; callers fall back to the
local scorer.
"""
