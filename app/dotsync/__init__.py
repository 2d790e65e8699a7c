"""dotsync - symlink-based dotfiles management.

Mirrors a version-controlled repository of configuration files onto the
home directory and imports existing home-directory files back into it.
"""

__version__ = "0.4.0"
