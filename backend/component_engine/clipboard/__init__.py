"""Clipboard payloads: native builder envelope and multi-MIME items."""
