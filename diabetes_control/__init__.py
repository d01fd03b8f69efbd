"""
DiabetesControl — type 1 diabetes self-management questionnaire scoring,
history tracking and trend analysis.
"""

__version__ = "0.1.0"
