"""
Main service file that configures and runs the upload server
"""
from config.settings import PORT
from utils.logging_utils import setup_logging
from webserver import create_app, run_flask

logger = setup_logging()


def main():
    logger.info("Upload service is starting...")
    app = create_app()
    run_flask(app, PORT)


if __name__ == "__main__":
    main()
