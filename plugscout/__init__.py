"""Locate and normalize AI coding-agent plugin bundles hosted on GitHub."""

__version__ = "0.3.0"
