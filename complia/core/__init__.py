"""Core infrastructure package for shared application functionality.

- **config**: Centralized configuration management with environment support
- **constants**: Shared constants used across layers
- **context**: Request context and correlation ID management
- **exceptions**: Structured exception hierarchy with error codes
- **logging**: Loguru setup with console and JSON formatters
- **observability**: Distributed tracing with OpenTelemetry
"""
