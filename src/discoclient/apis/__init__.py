"""Client modules generated from the discovery documents under ``discovery/``."""
