"""cleanctl - storage scan and cleanup engine.

Scans a directory tree, classifies files, finds exact duplicates,
flags junk and large files, and deletes through a quarantine area
that supports undo.
"""

__version__ = "0.3.0"
