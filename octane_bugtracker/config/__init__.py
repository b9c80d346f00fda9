"""Connection configuration, settings and HTTP transport."""
