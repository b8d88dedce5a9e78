"""operation-hooks command line interface."""
