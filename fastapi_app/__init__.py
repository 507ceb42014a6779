"""HTTP host for the preference recommender."""
