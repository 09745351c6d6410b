"""HTTP layer: routers for every domain of the API."""
