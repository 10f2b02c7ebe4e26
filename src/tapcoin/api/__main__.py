# src/tapcoin/api/__main__.py
from __future__ import annotations

import uvicorn

from tapcoin.env import load_dotenv_if_present


def main() -> None:
    # Load .env early so TAPCOIN_* vars exist before anything reads them.
    load_dotenv_if_present()

    # Import after dotenv load (prevents "config read before env" surprises)
    from tapcoin.runtime.chain_config import load_chain_config
    from tapcoin.structured_logging import configure_structured_logging

    cfg = load_chain_config()
    configure_structured_logging(cfg.log_level)

    uvicorn.run(
        "tapcoin.api.app:create_app",
        factory=True,
        host=cfg.api_host,
        port=int(cfg.api_port),
        log_level=cfg.log_level.lower(),
    )


if __name__ == "__main__":
    main()
