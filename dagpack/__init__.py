"""Internal implementation package for DagKit."""
