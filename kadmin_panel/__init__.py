"""Consumer session panel for browsing Kafka topics through a kadmin backend."""

__version__ = "0.1.0"
