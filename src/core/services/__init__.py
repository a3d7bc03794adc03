"""Services: caches, resolution, population and orchestration."""
