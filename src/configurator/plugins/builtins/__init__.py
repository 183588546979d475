"""Built-in plugins registered directly by the service layer."""
