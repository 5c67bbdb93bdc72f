"""Stop sequencing, route metrics and estimator annotation merge."""
