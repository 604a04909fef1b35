"""Data subpackage - seed CSVs and loaders."""
