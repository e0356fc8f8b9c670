"""Built-in CLI command groups (``auth``, ``courses``, ``submissions``, ``config``)."""
