"""Block type definitions and the registry that holds them."""
