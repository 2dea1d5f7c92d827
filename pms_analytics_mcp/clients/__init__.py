"""HTTP clients for PMS vendor APIs."""
