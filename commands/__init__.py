"""Text command handlers dispatched by ``app.container.ServiceContainer``."""
