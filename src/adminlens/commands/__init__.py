"""Built-in CLI commands (discovery, ``classify`` and ``products``)."""
