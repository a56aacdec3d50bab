"""Loading paper pipeline, catalog and report services, batch import."""
