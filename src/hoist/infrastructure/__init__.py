"""Infrastructure - logging, HTTP and local persistence helpers."""
