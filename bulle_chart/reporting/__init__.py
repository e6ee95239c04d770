"""
bulle_chart.reporting: terminal output for the CLI.

Modules:
  formatters  ASCII formatters for professions, join views, comparison
              tables and recommendations.
"""
