"""Application layer: concurrency helpers and update workflows."""
