"""Core building blocks: configuration, logging, errors and models."""
