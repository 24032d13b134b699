"""Catch-feedback prompt scheduling, the durable feedback queue and its uploader."""
