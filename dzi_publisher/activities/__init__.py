"""Job stages: tile generation and concurrent upload of the results."""
