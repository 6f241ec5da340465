"""CLI agent discovery and supervised invocation."""
