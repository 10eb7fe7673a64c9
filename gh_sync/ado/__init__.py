"""Azure DevOps (tracker) client abstractions and adapters."""
