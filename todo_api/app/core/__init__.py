"""Cross-cutting infrastructure: config, logging, errors, datastore, security."""
