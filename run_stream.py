from __future__ import annotations

from dotenv import load_dotenv

load_dotenv()

from flowstream.server import main


if __name__ == "__main__":
    raise SystemExit(main())
