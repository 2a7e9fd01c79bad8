"""DevTrace engine — configuration, errors and structured logging."""
