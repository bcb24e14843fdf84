"""Building blocks for connected devices: a URL parser, JSON number handling, writers, strings, a memory pool and a DHT20 driver."""

__version__ = "0.1.0"

__all__ = ["config", "dht20", "floats", "memory", "numbers", "strings", "urlparser", "writers"]