"""Task registry, task context and the capability providers that fill them."""
