"""
Telemetry application for the Chemical Equipment Telemetry Dashboard.

This app contains:
- The analysis pipeline: CSV parsing, summary statistics, outlier detection
  and a data-quality score.
- A small per-user key-value store that keeps the current session, archived
  record batches and the upload history.
- API views for uploading CSV data, enrichment, history and PDF reports.
"""
