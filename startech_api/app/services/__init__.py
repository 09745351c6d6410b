"""Business logic for the Startech API, one service class per domain."""
