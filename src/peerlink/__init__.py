"""peerlink — connection requests and a symmetric social graph."""

__version__ = "0.3.0"
