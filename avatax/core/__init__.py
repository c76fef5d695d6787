"""Core infrastructure shared by the AvaTax client and transaction builder.

This package provides the cross-cutting pieces used by every layer of the
client library:

- **config**: Client settings loaded from keyword arguments, environment and .env
- **constants**: Hosts, header names, SDK identification and timeouts
- **exceptions**: Structured exception hierarchy with error codes
- **error_context**: Redaction of sensitive values before they reach the logs
- **logging**: Loguru setup with console and JSON formatters
- **types**: Type aliases for JSON payloads and log context
"""
