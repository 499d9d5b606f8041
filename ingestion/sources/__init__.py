"""Remote data source adapters."""
