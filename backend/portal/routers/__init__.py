"""HTTP routers mounted by the application factory."""
