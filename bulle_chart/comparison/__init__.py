"""
Comparison metrics aggregator.

Modules
-------
metrics : ProfessionMetrics dataclass + build_profession_metrics() +
          calculate_profession_metrics() + calculate_professions_metrics().
"""
