"""sentiwatch/parsers — upload parsing."""
