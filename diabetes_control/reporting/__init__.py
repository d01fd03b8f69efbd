"""
diabetes_control.reporting — Text reports and flat-file export.

Modules:
  formatters — Plain-text recommendation, trend and history formatters.
  export     — Report files plus CSV/JSON history export helpers.
"""
