"""Alumni tracer survey response service."""
