"""Per-domain routers aggregated by ``api.router``."""
