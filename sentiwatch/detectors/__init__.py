"""sentiwatch/detectors — alert rules and per-session alert state."""
