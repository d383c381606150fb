"""Application layer: DTOs, ports and the logging pipeline services."""
