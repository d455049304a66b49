"""
Recommendation engine: turns ratings, frequency preferences and meal-plan
history into a ranked list of recipes to cook next, with reason codes.

Modules
-------
signals  : RecipeSignal dataclass + aggregate_signals() — pure folding of the
           rating log and assignment history.
scorer   : ScoreBreakdown dataclass + score_signal() — 30/40/30 weighted
           formula with the "Never" short-circuit.
ranker   : ScoredRecipe dataclass + build_scored_recipes() + rank_recipes()
           + build_recommendation_list().
service  : RecommendationService.recommend(week_start_date) over a
           RecipeSnapshotSource.
reporter : write_recommendation_json() + write_recommendation_csv()
           + write_signals_parquet() — file output.
"""
