"""Rolodex core: configuration, logging, exceptions, and the record store."""
