"""Run-scoped logging context, formatters and handlers."""
