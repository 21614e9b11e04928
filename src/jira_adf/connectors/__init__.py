"""External system connectors built on the ADF converter."""
