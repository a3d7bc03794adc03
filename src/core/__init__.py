"""Population engine core: config, domain, interfaces and services."""
