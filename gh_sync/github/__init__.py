"""GitHub (forge) client abstractions and adapters."""
