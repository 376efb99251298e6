"""Service layer for the CRM app: backend queries, report shaping and exports."""
