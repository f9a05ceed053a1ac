"""change-tree - Render version-control changes as a folder tree."""

__version__ = "0.1.0"

# Directory and file constants
CT_DIR = ".change-tree"
CONFIG_FILE = "config.json"
