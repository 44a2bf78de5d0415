"""Base layer: models, errors, logging, cancellation and the streaming core."""
