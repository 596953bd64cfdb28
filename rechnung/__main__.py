from rechnung.cli.app import main_menu
from rechnung.logging import configure_logging


def main() -> None:
    configure_logging()
    main_menu()


if __name__ == "__main__":
    main()
