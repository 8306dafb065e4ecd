"""Readonly forwarding proxy that annotates upstream API responses with a notice."""
