from __future__ import annotations

from alpine_zfs_installer.main import main

if __name__ == "__main__":
    raise SystemExit(main())
