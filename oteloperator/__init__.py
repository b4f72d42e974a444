"""OpenTelemetry collector resource model, admission checks, a task reconciler and a target allocator."""

__version__ = "0.1.0"