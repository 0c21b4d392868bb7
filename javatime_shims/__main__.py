"""Allow ``python -m javatime_shims``."""

from javatime_shims.main import main

if __name__ == "__main__":
    raise SystemExit(main())
