"""One-way synchronization of GitHub issues into Azure DevOps work items."""
