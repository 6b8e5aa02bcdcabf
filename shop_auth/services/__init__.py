"""Service-layer wiring over the auth repositories."""
