"""
OpenTelemetry setup and request instrumentation.
"""
