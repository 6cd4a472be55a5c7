"""YouClinic CRM backend."""
