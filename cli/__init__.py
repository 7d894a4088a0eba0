"""Command-line client for the sensor telemetry service."""
