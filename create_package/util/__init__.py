"""
Utility functions and helpers.

This package contains reusable utilities for file operations, polling,
logging, templating and progress reporting.

Modules:
- files: Write-once configuration file writer
- logging: Logging configuration
- progress: Step progress reporting
- redact: Token redaction for error output
- retry: Fixed-delay polling helpers
- templates: Jinja2 template rendering
"""
