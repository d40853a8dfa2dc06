"""Core building blocks shared by all services: config, logging, errors."""
