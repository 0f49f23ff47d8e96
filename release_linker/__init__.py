"""ssh-release-linker - versioned SSH releases with symlink cutover."""

__version__ = "1.0.0"
