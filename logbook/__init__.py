"""Log entry model and the tools that store, fetch, export and summarise entries."""
