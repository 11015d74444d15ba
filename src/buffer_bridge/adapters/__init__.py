"""Host adapters that drive the bridge from a user interface."""
