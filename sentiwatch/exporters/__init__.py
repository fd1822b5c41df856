"""sentiwatch/exporters — flat file exports."""
