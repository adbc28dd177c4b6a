"""Command-line interface for the SQL analyzer."""
