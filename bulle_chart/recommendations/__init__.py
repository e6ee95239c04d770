"""
Recommendation engine: scores professions from their joined categories and
recommends the best fit with a confidence label and an explanation.

Modules
-------
scorer : TypeDistribution / CategoryScore / ProfessionScore dataclasses +
         type_multiplier() + priority_multiplier() + compute_profession_score()
         (pure functions, no storage access).
ranker : Confidence / Explanation / Recommendation dataclasses +
         calculate_confidence() + build_explanation() + get_recommendation().
"""
