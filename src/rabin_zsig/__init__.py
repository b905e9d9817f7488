"""Rabin signatures over a Blum integer with Bleichenbacher compression."""
