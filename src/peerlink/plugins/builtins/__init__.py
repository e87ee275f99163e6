"""Plugins shipped with peerlink."""
