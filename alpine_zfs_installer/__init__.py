"""Alpine Linux installer for UEFI + encrypted ZFS root (ZFSBootMenu).

Core design goals:
- Strictly ordered, fail-fast pipeline
- Immutable configuration passed to every step
- Every external command logged
- Destructive by nature: re-running wipes the disk again
"""

__all__ = []
