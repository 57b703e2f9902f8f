"""Job search tracker: entity management and integrity layer for companies, jobs and contacts."""
