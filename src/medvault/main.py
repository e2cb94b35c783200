"""Application entry point for the MedVault backend server."""

from medvault.app import App
from medvault.config import Config
from medvault.core.core import Core
from medvault.logging import setup_logging
from medvault.web.runner import run_server


def main() -> None:
    config = Config()  # type: ignore[call-arg]
    setup_logging(config.debug)
    app = App(Core(config))
    run_server(app, config)


if __name__ == "__main__":
    main()
