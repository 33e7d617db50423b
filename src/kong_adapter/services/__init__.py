"""Services: the state providers the reconciliation engine runs against."""
