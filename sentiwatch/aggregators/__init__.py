"""sentiwatch/aggregators — summary, rollups and weekly digest."""
