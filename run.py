import logging
import os

from waitress import serve

from reaper_setlist import create_app

# --- Configuration ---
HOST = os.environ.get('SETLIST_HOST', '0.0.0.0')
PORT = int(os.environ.get('SETLIST_PORT', '4000'))
THREADS = 8
# --- End Configuration ---


def main():
    logging.basicConfig(
        level=os.environ.get('SETLIST_LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s %(levelname)s %(message)s',
    )
    app = create_app()
    logging.info(f"Starting Waitress server on http://{HOST}:{PORT} ...")
    serve(app, host=HOST, port=PORT, threads=THREADS)


if __name__ == '__main__':
    main()
