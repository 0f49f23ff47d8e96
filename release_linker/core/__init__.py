"""Core configuration and run scoping for release linker."""
